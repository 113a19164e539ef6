import os

import pandas as pd
import pytest

import main
from data_cleaning import clean_features, clean_price
from eda import perform_eda
from errors import EmptyNumericColumnError

from conftest import make_listings


def _run(csv_path, tmp_path, **kwargs):
    return main.run_pipeline(
        csv_path,
        plot_dir=tmp_path / "plots",
        report_dir=tmp_path / "reports",
        cleaned_path=tmp_path / "interim" / "cleaned.csv",
        skip_eda=True,
        **kwargs,
    )


def test_pipeline_end_to_end(listings_csv, tmp_path):
    out = _run(listings_csv, tmp_path)

    cleaned = out["cleaned"]
    # rows 5 (power), 8 (sentinel) and 12 (mileage) lose a feature; prices are imputed
    assert len(cleaned) == 117
    assert cleaned["price"].notna().all()
    assert cleaned["model"].nunique() <= 21
    assert cleaned.index.equals(pd.RangeIndex(len(cleaned)))

    assert out["matrix"].n_rows == 117
    assert out["cv_report"].n_folds == 5
    assert out["results"].rsquared > 0.8

    for key in ("ols_summary", "vif", "cross_validation", "residuals"):
        assert os.path.exists(out["paths"][key])
    assert os.path.exists(tmp_path / "interim" / "cleaned.csv")
    assert os.path.exists(tmp_path / "plots" / "residual_analysis.png")
    assert os.path.exists(tmp_path / "plots" / "actual_vs_predicted.png")


def test_residuals_joined_back_on_id(listings_csv, tmp_path):
    out = _run(listings_csv, tmp_path)
    merged = out["residuals"]

    assert {"id", "price", "actual", "fitted", "residual"} <= set(merged.columns)
    assert len(merged) == len(out["cleaned"])
    assert (merged["price"] == merged["actual"]).all()

    saved = pd.read_csv(out["paths"]["residuals"])
    assert saved["id"].tolist() == merged["id"].tolist()


def test_residuals_without_id_column(tmp_path, caplog):
    path = tmp_path / "no_id.csv"
    make_listings(with_id=False).to_csv(path, index=False)

    with caplog.at_level("WARNING"):
        out = _run(path, tmp_path)

    assert "Join key 'id' not found" in caplog.text
    assert list(out["residuals"].columns) == ["actual", "fitted", "residual"]


def test_pipeline_is_deterministic(listings_csv, tmp_path):
    first = _run(listings_csv, tmp_path / "a")
    second = _run(listings_csv, tmp_path / "b")

    pd.testing.assert_frame_equal(first["cleaned"], second["cleaned"])
    pd.testing.assert_frame_equal(first["matrix"].X, second["matrix"].X)
    pd.testing.assert_series_equal(first["matrix"].y, second["matrix"].y)
    pd.testing.assert_frame_equal(first["residuals"], second["residuals"])
    pd.testing.assert_frame_equal(first["vif"], second["vif"])
    pd.testing.assert_frame_equal(first["cv_report"].to_frame(), second["cv_report"].to_frame())


def test_pipeline_raises_on_all_bad_prices(tmp_path):
    df = make_listings(n=20)
    df["price"] = "on request"
    path = tmp_path / "bad.csv"
    df.to_csv(path, index=False)

    with pytest.raises(EmptyNumericColumnError):
        _run(path, tmp_path)


def test_cli_returns_nonzero_on_pipeline_error(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    df = make_listings(n=20)
    df["price"] = "on request"
    df.to_csv(tmp_path / "bad.csv", index=False)

    code = main.cli(
        [
            "--data", str(tmp_path / "bad.csv"),
            "--report-dir", str(tmp_path / "reports"),
            "--plot-dir", str(tmp_path / "plots"),
            "--skip-eda",
        ]
    )
    assert code == 1


def test_cli_returns_nonzero_on_missing_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    code = main.cli(
        [
            "--data", str(tmp_path / "missing.csv"),
            "--report-dir", str(tmp_path / "reports"),
            "--plot-dir", str(tmp_path / "plots"),
        ]
    )
    assert code == 1


def test_perform_eda_writes_plots(raw_listings, tmp_path):
    df = clean_features(clean_price(raw_listings))
    perform_eda(df, str(tmp_path))

    for name in (
        "distribution_price.png",
        "distribution_mileage.png",
        "distribution_power.png",
        "cars_per_year.png",
        "price_by_brand.png",
        "price_by_fuel_type.png",
        "correlation_matrix.png",
        "price_vs_mileage_interactive.html",
    ):
        assert os.path.exists(tmp_path / name), name


def test_unparseable_feature_stops_before_eda(tmp_path, caplog):
    df = make_listings(n=30)
    df["power"] = "n/a"
    path = tmp_path / "no_power.csv"
    df.to_csv(path, index=False)

    with pytest.raises(EmptyNumericColumnError, match="power"):
        main.run_pipeline(
            path,
            plot_dir=tmp_path / "plots",
            report_dir=tmp_path / "reports",
            cleaned_path=tmp_path / "interim" / "cleaned.csv",
        )

    assert "feature cleaning failed" in caplog.text
    assert os.listdir(tmp_path / "plots") == []
    assert not os.path.exists(tmp_path / "interim" / "cleaned.csv")


def test_cli_unparseable_feature_exit_code(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    df = make_listings(n=30)
    df["power"] = "n/a"
    df.to_csv(tmp_path / "no_power.csv", index=False)

    code = main.cli(
        [
            "--data", str(tmp_path / "no_power.csv"),
            "--report-dir", str(tmp_path / "reports"),
            "--plot-dir", str(tmp_path / "plots"),
        ]
    )
    assert code == 1
    assert os.listdir(tmp_path / "plots") == []


def test_cli_defaults_read_the_fixed_data_path(monkeypatch):
    import importlib

    import config

    monkeypatch.delenv("CAR_PRICE_DATA", raising=False)
    importlib.reload(config)

    args = main.build_parser().parse_args([])
    assert args.data == os.path.join(config.BASE_DIR, "data", "raw", "cars.csv")
    assert args.report_dir == config.REPORT_DIR
    assert args.plot_dir == config.PLOT_DIR
    assert not args.skip_eda
