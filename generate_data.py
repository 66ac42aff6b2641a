# 0. generate_data.py

import logging
import os
from dataclasses import dataclass

import numpy as np
import pandas as pd

from errors import InputValidationError

logger = logging.getLogger(__name__)

COLUMNS = ['sex', 'age', 'sum_assured', 'id']

COUNT_PER_GROUP = 100

# Number of policies whose age is blanked out, regardless of portfolio size.
N_MISSING_AGES = 10


@dataclass(frozen=True)
class ClusterSpec:
    mean_age: float
    sd_age: float
    mean_sum_assured: float
    sd_sum_assured: float


MALE_CLUSTERS = [
    ClusterSpec(20, 3, 10000, 2000),
    ClusterSpec(20, 4, 35000, 3000),
    ClusterSpec(45, 4.2, 8000, 1000),
    ClusterSpec(45, 3, 30000, 4000),
    ClusterSpec(70, 3.2, 10000, 1000),
    ClusterSpec(70, 6, 45000, 6000),
]

FEMALE_CLUSTERS = [
    ClusterSpec(25, 2, 40000, 4000),
    ClusterSpec(32, 3.2, 9000, 1000),
    ClusterSpec(45, 2.2, 42000, 3500),
    ClusterSpec(57, 3, 10000, 1500),
    ClusterSpec(70, 1.5, 10000, 1000),
    ClusterSpec(70, 4, 35000, 4200),
]


def _validate_specs(specs, sex):
    if not specs:
        raise InputValidationError(f"No cluster specs given for sex '{sex}'")
    for spec in specs:
        if spec.sd_age < 0 or spec.sd_sum_assured < 0:
            raise InputValidationError(f"Negative standard deviation in {spec}")


def sample_group(rng, sex, specs, count_per_group=COUNT_PER_GROUP):
    """Draw `count_per_group` rounded (age, sum_assured) pairs for every spec."""
    frames = []
    for spec in specs:
        age = np.round(rng.normal(spec.mean_age, spec.sd_age, count_per_group))
        sum_assured = np.round(rng.normal(spec.mean_sum_assured, spec.sd_sum_assured, count_per_group))
        frames.append(pd.DataFrame({
            'sex': [sex] * count_per_group,
            'age': age.astype('int64'),
            'sum_assured': sum_assured.astype('int64'),
        }))
    return pd.concat(frames, ignore_index=True)


def generate_portfolio(male_specs=MALE_CLUSTERS, female_specs=FEMALE_CLUSTERS,
                       count_per_group=COUNT_PER_GROUP, n_missing=N_MISSING_AGES, seed=None):
    """
    Generate a synthetic insurance portfolio.

    Parameters:
        male_specs (list[ClusterSpec]): Gaussian clusters for male policyholders.
        female_specs (list[ClusterSpec]): Gaussian clusters for female policyholders.
        count_per_group (int): Number of policies drawn per cluster.
        n_missing (int): Number of policies whose age is set to missing.
        seed (int): Seed of the single random generator used for every draw.

    Returns:
        pd.DataFrame: Columns sex, age (nullable Int64), sum_assured, id,
        ordered by ascending id.
    """
    if count_per_group < 1:
        raise InputValidationError(f"count_per_group must be at least 1, got {count_per_group}")
    _validate_specs(male_specs, 'm')
    _validate_specs(female_specs, 'f')

    n_total = (len(male_specs) + len(female_specs)) * count_per_group
    if not 0 <= n_missing <= n_total:
        raise InputValidationError(f"n_missing must be between 0 and {n_total}, got {n_missing}")

    rng = np.random.default_rng(seed)

    males = sample_group(rng, 'm', male_specs, count_per_group)
    females = sample_group(rng, 'f', female_specs, count_per_group)
    policies = pd.concat([males, females], ignore_index=True)

    policies['id'] = rng.permutation(n_total).astype('int64') + 1
    policies = policies.sort_values('id').reset_index(drop=True)

    age = policies['age'].astype('Int64')
    missing_rows = rng.choice(n_total, size=n_missing, replace=False)
    age.iloc[missing_rows] = pd.NA
    policies['age'] = age

    logger.info(f"Generated portfolio with {n_total} policies ({n_missing} without age)")
    return policies[COLUMNS]


def save_portfolio(df, filepath="data/insurance_portfolio.txt"):
    os.makedirs(os.path.dirname(filepath) or ".", exist_ok=True)
    df[COLUMNS].to_csv(filepath, index=False, na_rep="")
    logger.info(f"Portfolio saved to: {filepath}")
    return filepath


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    save_portfolio(generate_portfolio(seed=100), "insurance_portfolio.txt")
