# plotting.py

import logging
import os
import traceback
import numpy as np
import pandas as pd
import matplotlib
matplotlib.use('Agg')  # Use 'Agg' backend for matplotlib
import matplotlib.pyplot as plt
import seaborn as sns
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score

###############################################################################
# Regression diagnostics
###############################################################################

def _fit_metrics(y_true, y_pred):
    """MAE, RMSE and R² of fitted prices as floats."""
    mae = mean_absolute_error(y_true, y_pred)
    rmse = np.sqrt(mean_squared_error(y_true, y_pred))
    r2 = r2_score(y_true, y_pred) if len(y_true) > 1 else float('nan')
    return float(mae), float(rmse), float(r2)


def _save(fig, plot_dir, filename):
    os.makedirs(plot_dir, exist_ok=True)
    fpath = os.path.join(plot_dir, filename)
    fig.savefig(fpath)
    plt.close(fig)
    return fpath


def plot_residuals(y_true, y_pred, plot_dir):
    """
    Two panels for the in-sample OLS fit: residuals against fitted price,
    and the residual histogram.
    """
    try:
        actual = np.asarray(y_true, dtype=float)
        fitted = np.asarray(y_pred, dtype=float)
        resid = actual - fitted
        mae, rmse, r2 = _fit_metrics(actual, fitted)

        fig, (ax_scatter, ax_hist) = plt.subplots(1, 2, figsize=(16, 6))

        sns.scatterplot(x=fitted, y=resid, alpha=0.5, ax=ax_scatter)
        ax_scatter.axhline(y=0, color='r', linestyle='--')
        ax_scatter.set(xlabel='Fitted price', ylabel='Residual', title='Residuals vs Fitted')
        ax_scatter.grid(True)

        sns.histplot(resid, kde=True, bins=40, ax=ax_hist)
        ax_hist.set(xlabel='Residual', title='Residual Distribution')
        ax_hist.grid(True)

        fig.suptitle(f"OLS residuals  |  MAE={mae:,.0f}  RMSE={rmse:,.0f}  R²={r2:.3f}", fontsize=14)
        fig.tight_layout()

        fpath = _save(fig, plot_dir, 'residual_analysis.png')
        logging.info(f"Residual analysis plot saved => {fpath}")
        return fpath

    except Exception as e:
        logging.error(f"Error in plot_residuals: {str(e)}")
        logging.error(traceback.format_exc())
        return None


def plot_actual_vs_predicted(y_true, y_pred, plot_dir, filename: str | None = None):
    """Listed price against fitted price, with the identity line."""
    try:
        actual = np.asarray(y_true, dtype=float)
        fitted = np.asarray(y_pred, dtype=float)
        mae, rmse, r2 = _fit_metrics(actual, fitted)

        fig, ax = plt.subplots(figsize=(10, 6))
        sns.scatterplot(x=actual, y=fitted, alpha=0.5, ax=ax)

        lo = min(actual.min(), fitted.min())
        hi = max(actual.max(), fitted.max())
        ax.plot([lo, hi], [lo, hi], 'r--', lw=2)
        ax.set(xlabel='Listed price', ylabel='Fitted price', title='Listed vs Fitted Price (OLS)')
        ax.grid(True)
        ax.text(
            0.05, 0.95, f"MAE={mae:,.0f}\nRMSE={rmse:,.0f}\nR²={r2:.3f}",
            transform=ax.transAxes, fontsize=12, verticalalignment='top',
            bbox=dict(boxstyle='round', facecolor='wheat', alpha=0.5),
        )
        fig.tight_layout()

        fpath = _save(fig, plot_dir, filename or 'actual_vs_predicted.png')
        logging.info(f"Actual vs Predicted plot saved => {fpath}")
        return fpath
    except Exception as e:
        logging.error(f"Error in plot_actual_vs_predicted: {str(e)}")
        logging.error(traceback.format_exc())
        return None


def plot_vif(vif: pd.DataFrame, plot_dir, top_n=25):
    """Horizontal bar chart of the largest variance inflation factors."""
    try:
        finite = vif.replace([np.inf, -np.inf], np.nan).dropna(subset=['VIF'])
        if finite.empty:
            logging.warning("No finite VIF values to plot.")
            return None
        finite = finite.nlargest(top_n, 'VIF')

        fig, ax = plt.subplots(figsize=(12, max(4, 0.35 * len(finite))))
        sns.barplot(x='VIF', y='Feature', data=finite, color='steelblue', ax=ax)
        ax.axvline(x=10, color='r', linestyle='--', label='VIF = 10')
        ax.set_title(f"Top {len(finite)} Variance Inflation Factors", fontsize=14)
        ax.legend(loc='lower right')
        fig.tight_layout()

        fname = _save(fig, plot_dir, 'vif.png')
        logging.info(f"VIF plot saved => {fname}")
        return fname
    except Exception as e:
        logging.error(f"Error in plot_vif: {str(e)}")
        logging.error(traceback.format_exc())
        return None
