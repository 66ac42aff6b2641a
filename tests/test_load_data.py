import pytest

from errors import SchemaError
from load_data import clean_data, describe_portfolio, load_data


def write(tmp_path, text):
    path = tmp_path / "policies.txt"
    path.write_text(text)
    return str(path)


def test_missing_column_is_schema_error(tmp_path):
    path = write(tmp_path, "sex,age,id\nm,30,1\n")
    with pytest.raises(SchemaError, match="sum_assured"):
        load_data(path)


def test_accepts_uppercase_id_and_na_literal(tmp_path):
    path = write(tmp_path, "sex,age,sum_assured,ID\nm,30,1000,1\nf,NA,2000,2\nf,,3000,3\n")
    df = load_data(path)
    assert list(df.columns) == ['sex', 'age', 'sum_assured', 'id']
    assert df['age'].isna().sum() == 2
    assert df.loc[0, 'age'] == 30


def test_duplicate_ids_rejected(tmp_path):
    path = write(tmp_path, "sex,age,sum_assured,id\nm,30,1000,1\nf,40,2000,1\n")
    with pytest.raises(SchemaError, match="unique"):
        load_data(path)


def test_unknown_sex_rejected(tmp_path):
    path = write(tmp_path, "sex,age,sum_assured,id\nx,30,1000,1\n")
    with pytest.raises(SchemaError, match="sex"):
        load_data(path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_data(str(tmp_path / "nope.txt"))


def test_clean_removes_missing_ages(portfolio_file):
    raw = load_data(portfolio_file)
    clean, n_removed = clean_data(raw)

    assert n_removed == raw['age'].isna().sum() == 10
    assert len(clean) == len(raw) - n_removed
    assert clean['age'].notna().all()
    # input left untouched
    assert raw['age'].isna().sum() == 10


def test_clean_without_missing(tmp_path):
    raw = load_data(write(tmp_path, "sex,age,sum_assured,id\nm,30,1000,1\nf,40,2000,2\n"))
    clean, n_removed = clean_data(raw)
    assert n_removed == 0
    assert len(clean) == 2


def test_describe_portfolio(portfolio):
    summary = describe_portfolio(portfolio)
    assert summary['policies'] == 1200
    assert summary['male'] == summary['female'] == 600
    assert summary['missing_age'] == 10
    assert summary['age_min'] <= summary['age_max']
