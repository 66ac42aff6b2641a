# 1. load_data.py

import logging

import pandas as pd

from errors import SchemaError

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ['sex', 'age', 'sum_assured', 'id']
SEX_CODES = {'m', 'f'}


def load_data(filepath="data/insurance_portfolio.txt"):
    try:
        df = pd.read_csv(filepath)
    except FileNotFoundError:
        logger.error(f"File not found: {filepath}. Please check the path.")
        raise

    df.columns = [col.strip().lower() for col in df.columns]
    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise SchemaError(f"Missing required columns: {missing}")

    df = df[REQUIRED_COLUMNS].copy()
    df['sex'] = df['sex'].astype(str).str.strip().str.lower()
    unknown = sorted(set(df['sex']) - SEX_CODES)
    if unknown:
        raise SchemaError(f"Unknown sex codes: {unknown}")

    try:
        df['age'] = df['age'].astype('Int64')
        df['sum_assured'] = df['sum_assured'].astype('int64')
        df['id'] = df['id'].astype('int64')
    except (TypeError, ValueError) as e:
        raise SchemaError(f"Non-integer values in numeric columns: {e}") from e
    if df['id'].duplicated().any():
        raise SchemaError("Contract ids are not unique")

    logger.info(f"Loaded data with shape: {df.shape}")
    return df


def clean_data(df):
    """Drop policies without an age; returns the cleaned frame and the number of dropped rows."""
    missing_age = df['age'].isna()
    n_removed = int(missing_age.sum())
    clean = df.loc[~missing_age].copy()
    logger.info(f"Removed {n_removed} policies with missing age, {len(clean)} remain")
    return clean, n_removed


def describe_portfolio(df):
    summary = {
        'policies': len(df),
        'male': int((df['sex'] == 'm').sum()),
        'female': int((df['sex'] == 'f').sum()),
        'missing_age': int(df['age'].isna().sum()),
        'age_min': df['age'].min(),
        'age_max': df['age'].max(),
        'sum_assured_min': df['sum_assured'].min(),
        'sum_assured_max': df['sum_assured'].max(),
    }
    return pd.Series(summary, name='portfolio')
