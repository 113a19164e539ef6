#!/usr/bin/env python3
"""
main.py: end-to-end car‑price analysis controller
--------------------------------------------------
• Loads the listings CSV and checks the header contract
• Runs price clean → feature clean → model collapse → EDA → OLS + VIF → k‑fold CV
• Writes the regression report and diagnostic plots
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

import config as cfg
from data_cleaning import clean_features, clean_price, normalize_categoricals
from data_loading import load_data
from eda import perform_eda
from errors import CarPriceError
from feature_engineering import collapse_categories
from model_training import (
    build_design_matrix,
    calculate_vif,
    cross_validate_ols,
    fit_ols,
    residual_table,
    write_model_report,
)
from plotting import plot_actual_vs_predicted, plot_residuals, plot_vif
from utils import create_directories, merge_on_key


# ───────────────────────── HELPERS ────────────────────────── #

def setup_logging(loglevel: str = "INFO", log_file: str | None = "main.log") -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler(stream=sys.stdout)]
    if log_file:
        handlers.insert(0, logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, loglevel.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s: %(message)s",
        handlers=handlers,
    )


def run_stage(name: str, func, *args, **kwargs):
    """Run one pipeline stage, attributing pipeline errors to it."""
    logging.info("▶ %s", name)
    try:
        return func(*args, **kwargs)
    except CarPriceError as exc:
        logging.error("%s failed: %s", name, exc)
        raise


# ────────────────────────── PIPELINE ───────────────────────── #

def run_pipeline(
    data_path: str | Path = cfg.RAW_DATA_PATH,
    *,
    top_n: int = cfg.TOP_N_MODELS,
    folds: int = cfg.CV_FOLDS,
    plot_dir: str | Path = cfg.PLOT_DIR,
    report_dir: str | Path = cfg.REPORT_DIR,
    cleaned_path: str | Path | None = cfg.CLEANED_DATA_PATH,
    skip_eda: bool = False,
) -> dict:
    """Run every stage once and return the intermediate results."""
    plot_dir, report_dir = str(plot_dir), str(report_dir)
    create_directories([plot_dir, report_dir])

    raw = run_stage("loading", load_data, data_path)
    df = run_stage("price cleaning", clean_price, raw)
    df = run_stage("feature cleaning", clean_features, df, cfg.FEATURE_COLUMNS)
    df = normalize_categoricals(df, cfg.CATEGORICAL_COLUMNS)
    df = run_stage("category collapse", collapse_categories, df, cfg.MODEL_COL, top_n, cfg.OTHER_LABEL)
    df = df.reset_index(drop=True)

    if cleaned_path:
        Path(cleaned_path).parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(cleaned_path, index=False)
        logging.info("Cleaned dataset saved => %s", cleaned_path)

    if skip_eda:
        logging.info("--skip-eda flag set; no descriptive plots.")
    else:
        perform_eda(df, plot_dir)

    matrix = run_stage(
        "design matrix",
        build_design_matrix,
        df,
        cfg.FEATURE_COLUMNS,
        cfg.CATEGORICAL_COLUMNS,
        cfg.PRICE_COL,
        cfg.DROP_FIRST_CATEGORY,
    )
    results = run_stage("OLS fit", fit_ols, matrix)
    vif = calculate_vif(matrix.X)

    cv_matrix = run_stage(
        "cross-validation matrix",
        build_design_matrix,
        df,
        cfg.FEATURE_COLUMNS,
        cfg.CV_CATEGORICAL_COLUMNS,
        cfg.PRICE_COL,
        cfg.DROP_FIRST_CATEGORY,
    )
    cv_report = run_stage("cross-validation", cross_validate_ols, cv_matrix, folds, True, cfg.RANDOM_STATE)

    paths = write_model_report(results, vif, cv_report, report_dir)

    residuals = residual_table(matrix, results)
    if cfg.ID_COLUMN in df.columns:
        residuals[cfg.ID_COLUMN] = df.loc[residuals.index, cfg.ID_COLUMN]
    merged = merge_on_key(df, residuals, cfg.ID_COLUMN)
    if "residual" not in merged.columns:
        merged = residuals
    residual_path = os.path.join(report_dir, "residuals.csv")
    merged.to_csv(residual_path, index=False)
    paths["residuals"] = residual_path

    plot_residuals(residuals["actual"], residuals["fitted"], plot_dir)
    plot_actual_vs_predicted(residuals["actual"], residuals["fitted"], plot_dir)
    plot_vif(vif, plot_dir)

    logging.info("\n%s", results.summary())
    logging.info("\n%s", cv_report.format())

    return {
        "cleaned": df,
        "matrix": matrix,
        "results": results,
        "vif": vif,
        "cv_report": cv_report,
        "residuals": merged,
        "paths": paths,
    }


# ────────────────────────── MAIN FLOW ───────────────────────── #

def main(
    *,
    data_path: str,
    loglevel: str,
    top_n: int,
    folds: int,
    skip_eda: bool,
    report_dir: str,
    plot_dir: str,
) -> int:
    setup_logging(loglevel)

    logging.info("🚚 Loading raw data from %s", data_path)
    try:
        run_pipeline(
            data_path,
            top_n=top_n,
            folds=folds,
            plot_dir=plot_dir,
            report_dir=report_dir,
            skip_eda=skip_eda,
        )
    except (CarPriceError, FileNotFoundError):
        # already logged with the failing stage
        return 1
    except Exception:
        logging.exception("Unexpected failure in car price pipeline")
        raise

    logging.info("Pipeline finished; reports in %s", report_dir)
    return 0


def build_parser() -> argparse.ArgumentParser:
    cli_parser = argparse.ArgumentParser(description="Car‑price EDA and OLS regression pipeline")
    cli_parser.add_argument("--data", default=cfg.RAW_DATA_PATH, help="Path to the listings CSV")
    cli_parser.add_argument("--log-level", default="INFO", help="DEBUG | INFO | WARNING | ERROR")
    cli_parser.add_argument("--top-n", type=int, default=cfg.TOP_N_MODELS, help="Model levels kept before collapsing to 'Other'")
    cli_parser.add_argument("--folds", type=int, default=cfg.CV_FOLDS, help="Number of cross-validation folds")
    cli_parser.add_argument("--skip-eda", action="store_true", help="Skip descriptive plots")
    cli_parser.add_argument("--report-dir", default=cfg.REPORT_DIR, help="Directory for text/CSV reports")
    cli_parser.add_argument("--plot-dir", default=cfg.PLOT_DIR, help="Directory for plots")
    return cli_parser


def cli(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    return main(
        data_path=args.data,
        loglevel=args.log_level,
        top_n=args.top_n,
        folds=args.folds,
        skip_eda=args.skip_eda,
        report_dir=args.report_dir,
        plot_dir=args.plot_dir,
    )


if __name__ == "__main__":
    sys.exit(cli())
