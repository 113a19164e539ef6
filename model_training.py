# model_training.py

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Sequence

import numpy as np
import pandas as pd
import statsmodels.api as sm
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score
from sklearn.model_selection import KFold
from statsmodels.stats.outliers_influence import variance_inflation_factor

from config import (
    CATEGORICAL_COLUMNS,
    CV_FOLDS,
    DROP_FIRST_CATEGORY,
    FEATURE_COLUMNS,
    PRICE_COL,
    RANDOM_STATE,
)
from errors import MissingColumnsError, ModelFitError
from feature_engineering import one_hot_encode

__all__ = [
    "EncodedMatrix",
    "FoldScore",
    "CrossValidationReport",
    "build_design_matrix",
    "fit_ols",
    "calculate_vif",
    "calculate_mape",
    "cross_validate_ols",
    "residual_table",
    "write_model_report",
]


@dataclass(frozen=True, eq=False)
class EncodedMatrix:
    """Row-aligned predictors and target ready for fitting.

    ``X`` holds numeric predictors followed by one-hot indicator columns;
    ``y`` is the cleaned price. Both share the same index.
    """

    X: pd.DataFrame
    y: pd.Series
    numeric: tuple[str, ...] = ()
    categorical: tuple[str, ...] = ()

    def __post_init__(self):
        if len(self.X) != len(self.y):
            raise ModelFitError(
                f"Predictor rows ({len(self.X)}) and target rows ({len(self.y)}) differ"
            )
        if not self.X.index.equals(self.y.index):
            raise ModelFitError("Predictor and target indexes are not aligned")
        if self.y.isna().any():
            raise ModelFitError("Target contains missing values")

    @property
    def feature_names(self) -> List[str]:
        return [str(c) for c in self.X.columns]

    @property
    def n_rows(self) -> int:
        return len(self.y)


@dataclass(frozen=True)
class FoldScore:
    fold: int
    n_train: int
    n_test: int
    rmse: float
    mae: float
    mape: float
    r2: float


@dataclass
class CrossValidationReport:
    """Per-fold and aggregated out-of-sample error of the OLS variant."""

    n_folds: int
    features: List[str]
    folds: List[FoldScore] = field(default_factory=list)

    @property
    def mean_rmse(self) -> float:
        return float(np.mean([f.rmse for f in self.folds]))

    @property
    def mean_mae(self) -> float:
        return float(np.mean([f.mae for f in self.folds]))

    @property
    def mean_mape(self) -> float:
        return float(np.mean([f.mape for f in self.folds]))

    @property
    def mean_r2(self) -> float:
        # nanmean: a one-row test fold has no defined R²
        scores = [f.r2 for f in self.folds]
        return float(np.nanmean(scores)) if np.isfinite(scores).any() else float("nan")

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame([asdict(f) for f in self.folds])

    def format(self) -> str:
        lines = [
            f"{self.n_folds}-fold cross-validation (OLS)",
            f"Features ({len(self.features)}): {', '.join(self.features)}",
            "",
            self.to_frame().to_string(index=False, float_format=lambda v: f"{v:,.4f}"),
            "",
            f"Mean RMSE: {self.mean_rmse:,.2f}",
            f"Mean MAE:  {self.mean_mae:,.2f}",
            f"Mean MAPE: {self.mean_mape:.2f}%",
            f"Mean R²:   {self.mean_r2:.4f}",
        ]
        return "\n".join(lines)


def build_design_matrix(
    data: pd.DataFrame,
    numeric: Sequence[str] = FEATURE_COLUMNS,
    categorical: Sequence[str] = CATEGORICAL_COLUMNS,
    target: str = PRICE_COL,
    drop_first: bool = DROP_FIRST_CATEGORY,
) -> EncodedMatrix:
    """Assemble the encoded predictor matrix and target from cleaned data."""
    numeric, categorical = list(numeric), list(categorical)
    missing = set(numeric + categorical + [target]) - set(data.columns)
    if missing:
        raise MissingColumnsError(missing, stage="design matrix")
    if data.empty:
        raise ModelFitError("No rows left after cleaning; nothing to fit")

    encoded = one_hot_encode(data[numeric + categorical], categorical, drop_first=drop_first)
    X = encoded.astype(float)
    bad = [c for c in X.columns if X[c].isna().any()]
    if bad:
        raise ModelFitError(f"Predictors contain missing values: {bad}")

    y = data[target].astype(float)
    matrix = EncodedMatrix(X=X, y=y, numeric=tuple(numeric), categorical=tuple(categorical))
    logging.info(f"Design matrix: {X.shape[0]:,} rows x {X.shape[1]} predictors")
    return matrix


def fit_ols(matrix: EncodedMatrix, add_constant: bool = True):
    """Fit price ~ predictors by ordinary least squares (statsmodels)."""
    if matrix.n_rows == 0:
        raise ModelFitError("Cannot fit OLS on an empty matrix")
    X = sm.add_constant(matrix.X, has_constant="add") if add_constant else matrix.X
    results = sm.OLS(matrix.y, X).fit()
    logging.info(
        f"OLS fitted on {int(results.nobs):,} rows: R²={results.rsquared:.4f}, "
        f"adj. R²={results.rsquared_adj:.4f}"
    )
    return results


def calculate_vif(X: pd.DataFrame) -> pd.DataFrame:
    """Variance inflation factor of every predictor (intercept included in the fit)."""
    df = X.astype(float)
    exog = sm.add_constant(df, has_constant="add")
    with np.errstate(divide="ignore", invalid="ignore"):
        vifs = [
            variance_inflation_factor(exog.values, i)
            for i in range(1, exog.shape[1])
        ]
    vif_data = pd.DataFrame({"Feature": df.columns, "VIF": vifs})
    high = vif_data[vif_data["VIF"] > 10]
    if not high.empty:
        logging.warning(f"High multicollinearity (VIF > 10): {high['Feature'].tolist()}")
    return vif_data


def calculate_mape(y_true, y_pred):
    y_true, y_pred = np.array(y_true), np.array(y_pred)
    nonzero_indices = y_true != 0
    if not np.any(nonzero_indices):
        return np.inf
    return np.mean(np.abs((y_true[nonzero_indices] - y_pred[nonzero_indices]) / y_true[nonzero_indices])) * 100


def cross_validate_ols(
    matrix: EncodedMatrix,
    k: int = CV_FOLDS,
    shuffle: bool = True,
    random_state: int | None = RANDOM_STATE,
    add_constant: bool = True,
) -> CrossValidationReport:
    """
    K-fold cross-validation of the OLS model.

    Rows are partitioned with scikit-learn's KFold; each fold is fitted on the
    other k-1 folds with statsmodels and scored on the held-out fold.
    """
    n = matrix.n_rows
    if k < 2 or k > n:
        raise ModelFitError(f"Fold count must be between 2 and {n} rows, got {k}")

    kf = KFold(n_splits=k, shuffle=shuffle, random_state=random_state if shuffle else None)
    report = CrossValidationReport(n_folds=k, features=matrix.feature_names)

    for fold, (train_idx, test_idx) in enumerate(kf.split(matrix.X), start=1):
        X_train, X_test = matrix.X.iloc[train_idx], matrix.X.iloc[test_idx]
        y_train, y_test = matrix.y.iloc[train_idx], matrix.y.iloc[test_idx]
        if add_constant:
            X_train = sm.add_constant(X_train, has_constant="add")
            X_test = sm.add_constant(X_test, has_constant="add")

        fitted = sm.OLS(y_train, X_train).fit()
        y_pred = fitted.predict(X_test)

        r2 = r2_score(y_test, y_pred) if len(y_test) > 1 else float("nan")
        score = FoldScore(
            fold=fold,
            n_train=len(train_idx),
            n_test=len(test_idx),
            rmse=float(np.sqrt(mean_squared_error(y_test, y_pred))),
            mae=float(mean_absolute_error(y_test, y_pred)),
            mape=float(calculate_mape(y_test, y_pred)),
            r2=float(r2),
        )
        report.folds.append(score)
        logging.info(
            f"Fold {fold}/{k}: RMSE={score.rmse:,.2f}, MAE={score.mae:,.2f}, R²={score.r2:.4f}"
        )

    logging.info(
        f"Cross-validation mean RMSE={report.mean_rmse:,.2f}, mean R²={report.mean_r2:.4f}"
    )
    return report


def residual_table(matrix: EncodedMatrix, results) -> pd.DataFrame:
    """Actual, fitted and residual price for every row of the fitted matrix."""
    fitted = pd.Series(np.asarray(results.fittedvalues), index=matrix.y.index)
    return pd.DataFrame(
        {
            "actual": matrix.y,
            "fitted": fitted,
            "residual": matrix.y - fitted,
        },
        index=matrix.y.index,
    )


def write_model_report(
    results,
    vif: pd.DataFrame,
    cv_report: CrossValidationReport | None,
    out_dir: str,
) -> Dict[str, str]:
    """Write OLS summary, VIF table and CV report. Returns dict of generated paths."""
    os.makedirs(out_dir, exist_ok=True)
    out: Dict[str, str] = {}

    summary_path = os.path.join(out_dir, "ols_summary.txt")
    with open(summary_path, "w", encoding="utf-8") as f:
        f.write(str(results.summary()))
    out["ols_summary"] = summary_path

    vif_path = os.path.join(out_dir, "vif.csv")
    vif.to_csv(vif_path, index=False)
    out["vif"] = vif_path

    if cv_report is not None:
        cv_path = os.path.join(out_dir, "cross_validation.txt")
        with open(cv_path, "w", encoding="utf-8") as f:
            f.write(cv_report.format() + "\n")
        out["cross_validation"] = cv_path

    for name, path in out.items():
        logging.info(f"Report '{name}' saved => {path}")
    return out
