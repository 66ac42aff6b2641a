# errors.py


class KMeansAnalysisError(Exception):
    """Base class for errors raised by the portfolio analysis."""


class InputValidationError(KMeansAnalysisError, ValueError):
    pass


class InvalidClusterCountError(InputValidationError):
    pass


class SchemaError(KMeansAnalysisError, ValueError):
    pass


class DegenerateInputError(KMeansAnalysisError, ValueError):
    pass


class ConvergenceError(KMeansAnalysisError, RuntimeError):
    pass
