# 2. preprocess.py

import logging

import numpy as np
import pandas as pd

from errors import DegenerateInputError, SchemaError

logger = logging.getLogger(__name__)

SCALE_COLUMNS = ['age', 'sum_assured']


def transform_columns(df, columns, func):
    """
    Apply `func` to each listed column and return a new DataFrame.

    Parameters:
        df (pd.DataFrame): Input table, left untouched.
        columns (list[str]): Columns to transform.
        func (callable): Maps a pd.Series to a pd.Series of the same length.

    Returns:
        pd.DataFrame: Copy of `df` with the listed columns replaced.
    """
    missing = [col for col in columns if col not in df.columns]
    if missing:
        raise SchemaError(f"Missing columns for transform: {missing}")

    out = df.copy()
    for col in columns:
        out[col] = func(df[col])
    return out


def z_scale(df, columns=SCALE_COLUMNS):
    """Standard-score the given columns with their mean and sample standard deviation.

    Returns the scaled frame together with ``{column: (mean, sd)}`` so the
    transform can be reversed with :func:`inverse_z_scale`.
    """
    params = {}
    for col in columns:
        if col not in df.columns:
            raise SchemaError(f"Missing column for scaling: {col}")
        values = df[col].astype('float64')
        mean = values.mean()
        sd = values.std(ddof=1)
        if not np.isfinite(mean) or not np.isfinite(sd) or sd == 0:
            raise DegenerateInputError(f"Column '{col}' has zero or undefined standard deviation")
        params[col] = (float(mean), float(sd))

    def standardize(series):
        mean, sd = params[series.name]
        return (series.astype('float64') - mean) / sd

    scaled = transform_columns(df, columns, standardize)
    logger.info(f"Scaled columns {list(columns)}")
    return scaled, params


def inverse_z_scale(df, params):
    def restore(series):
        mean, sd = params[series.name]
        return series.astype('float64') * sd + mean

    return transform_columns(df, list(params), restore)


def scaling_table(params):
    return pd.DataFrame.from_dict(params, orient='index', columns=['mean', 'sd'])
