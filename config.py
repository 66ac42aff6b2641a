# config.py

import os
from dataclasses import dataclass, field

from errors import InputValidationError


@dataclass
class AnalysisConfig:
    seed: int = 100
    count_per_group: int = 100
    n_restarts: int = 50
    max_iter: int = 100
    n_jobs: int = 1
    data_path: str = "data/insurance_portfolio.txt"
    output_dir: str = "output"
    features: list = field(default_factory=lambda: ['age', 'sum_assured'])
    unscaled_k: range = range(1, 5)
    scaled_k: range = range(1, 7)
    per_sex_k: int = 6

    @classmethod
    def from_env(cls, environ=None):
        environ = os.environ if environ is None else environ
        config = cls()
        ints = {
            'KMEANS_SEED': 'seed',
            'KMEANS_COUNT_PER_GROUP': 'count_per_group',
            'KMEANS_RESTARTS': 'n_restarts',
            'KMEANS_MAX_ITER': 'max_iter',
            'KMEANS_N_JOBS': 'n_jobs',
        }
        for var, attr in ints.items():
            if var in environ:
                try:
                    setattr(config, attr, int(environ[var]))
                except ValueError as e:
                    raise InputValidationError(f"{var} must be an integer, got {environ[var]!r}") from e
        config.data_path = environ.get('KMEANS_DATA_PATH', config.data_path)
        config.output_dir = environ.get('KMEANS_OUTPUT_DIR', config.output_dir)
        return config

    def kmeans_kwargs(self):
        return dict(n_restarts=self.n_restarts, max_iter=self.max_iter, seed=self.seed, n_jobs=self.n_jobs)
