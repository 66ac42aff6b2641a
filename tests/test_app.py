import os

import pytest

from app import run_analysis
from config import AnalysisConfig
from errors import InputValidationError


@pytest.fixture
def config(tmp_path):
    return AnalysisConfig(
        seed=7,
        count_per_group=20,
        n_restarts=3,
        max_iter=30,
        data_path=str(tmp_path / "data" / "insurance_portfolio.txt"),
        output_dir=str(tmp_path / "output"),
    )


def test_run_analysis_end_to_end(config):
    results = run_analysis(config)

    assert os.path.exists(config.data_path)
    assert results['n_removed'] == 10
    assert [r.k for r in results['unscaled']] == [1, 2, 3, 4]
    assert [r.k for r in results['scaled']] == [1, 2, 3, 4, 5, 6]
    assert list(results['by_sex']) == ['m', 'f']
    assert set(results['scaling']) == {'age', 'sum_assured'}
    assert list(results['elbow']['k']) == [1, 2, 3, 4, 5, 6]
    for name in ["portfolio.png", "portfolio_by_sex.png", "portfolio_colored.png", "portfolio_scaled.png",
                 "kmeans_unscaled.png", "kmeans_scaled.png", "kmeans_by_sex.png"]:
        assert os.path.exists(os.path.join(config.output_dir, name))


def test_run_analysis_reuses_existing_file(config):
    run_analysis(config)
    mtime = os.path.getmtime(config.data_path)
    run_analysis(config)
    assert os.path.getmtime(config.data_path) == mtime


def test_config_from_env():
    config = AnalysisConfig.from_env({
        'KMEANS_SEED': '42',
        'KMEANS_RESTARTS': '5',
        'KMEANS_DATA_PATH': 'policies.txt',
    })
    assert config.seed == 42
    assert config.n_restarts == 5
    assert config.max_iter == 100
    assert config.data_path == 'policies.txt'
    assert config.kmeans_kwargs() == {'n_restarts': 5, 'max_iter': 100, 'seed': 42, 'n_jobs': 1}


def test_config_rejects_non_integer():
    with pytest.raises(InputValidationError):
        AnalysisConfig.from_env({'KMEANS_SEED': 'abc'})
