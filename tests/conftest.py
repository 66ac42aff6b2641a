import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from generate_data import generate_portfolio, save_portfolio


@pytest.fixture
def portfolio():
    return generate_portfolio(seed=100)


@pytest.fixture
def portfolio_file(tmp_path, portfolio):
    return save_portfolio(portfolio, str(tmp_path / "insurance_portfolio.txt"))


@pytest.fixture
def two_blobs():
    rng = np.random.default_rng(7)
    a = rng.normal([0.0, 0.0], 1.0, size=(50, 2))
    b = rng.normal([100.0, 100.0], 1.0, size=(50, 2))
    data = pd.DataFrame(np.vstack([a, b]), columns=['x', 'y'])
    truth = np.repeat([0, 1], 50)
    return data, truth
