import os

import pandas as pd
import pytest

from data_cleaning import clean_features, clean_price
from statistical_tests import advanced_statistical_tests, price_anova, price_correlations


def test_price_anova_detects_group_difference():
    df = pd.DataFrame(
        {
            "fuel_type": ["diesel"] * 4 + ["petrol"] * 4 + ["electric"],
            "price": [10, 11, 10, 12, 30, 31, 29, 30, 50],
        }
    )
    f_stat, p_value = price_anova(df)
    assert f_stat > 100
    assert p_value < 0.001


def test_price_anova_needs_two_groups():
    df = pd.DataFrame({"fuel_type": ["diesel", "diesel", "petrol"], "price": [1, 2, 3]})
    assert price_anova(df) is None


def test_price_correlations():
    df = pd.DataFrame(
        {
            "power": [1.0, 2.0, 3.0, 4.0],
            "mileage": [4.0, 3.0, 2.0, 1.0],
            "year": [2010.0] * 4,
            "price": [10.0, 20.0, 30.0, 40.0],
        }
    )
    corr = price_correlations(df)
    assert corr["Feature"].tolist() == ["power", "mileage"]
    assert corr["Pearson r"].tolist() == pytest.approx([1.0, -1.0])


def test_advanced_statistical_tests_writes_heatmap(raw_listings, tmp_path):
    df = clean_features(clean_price(raw_listings))
    results = advanced_statistical_tests(df, str(tmp_path))

    assert set(results) == {"anova", "correlations", "corr_matrix"}
    assert os.path.exists(tmp_path / "correlation_matrix.png")
