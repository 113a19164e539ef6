# statistical_tests.py

import logging
import pandas as pd
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import seaborn as sns
from scipy import stats

from config import FEATURE_COLUMNS, FUEL_TYPE_COL, PRICE_COL
from utils import save_plot


def price_anova(data, group_col=FUEL_TYPE_COL, price_col=PRICE_COL):
    """One-way ANOVA of price across the levels of ``group_col``.

    Returns (F, p) or None when fewer than two groups have at least two rows.
    """
    groups = [
        group[price_col].values
        for _, group in data.groupby(group_col, sort=True)
        if len(group) >= 2
    ]
    if len(groups) < 2:
        return None
    f_stat, p_value = stats.f_oneway(*groups)
    return float(f_stat), float(p_value)


def price_correlations(data, features=FEATURE_COLUMNS, price_col=PRICE_COL):
    """Pearson r and p-value of each numeric feature against price."""
    rows = []
    for col in features:
        if col not in data.columns:
            continue
        pair = data[[col, price_col]].dropna()
        if len(pair) < 3 or pair[col].nunique() < 2 or pair[price_col].nunique() < 2:
            continue
        r, p = stats.pearsonr(pair[col], pair[price_col])
        rows.append({'Feature': col, 'Pearson r': float(r), 'p-value': float(p)})
    return pd.DataFrame(rows, columns=['Feature', 'Pearson r', 'p-value'])


def advanced_statistical_tests(data, plot_dir):
    """Perform advanced statistical tests."""
    logging.info("Performing advanced statistical tests...")
    results = {}

    try:
        anova = price_anova(data)
        if anova is not None:
            f_stat, p_value = anova
            logging.info(f"ANOVA price ~ {FUEL_TYPE_COL}: F-statistic: {f_stat:.2f}, p-value: {p_value:.4f}")
        results['anova'] = anova

        corr_with_price = price_correlations(data)
        for row in corr_with_price.itertuples(index=False):
            logging.info(f"Pearson r({row[0]}, {PRICE_COL}) = {row[1]:.3f} (p={row[2]:.4f})")
        results['correlations'] = corr_with_price

        # Correlation matrix
        numeric_cols = [c for c in (*FEATURE_COLUMNS, PRICE_COL) if c in data.columns]
        corr_matrix = data[numeric_cols].corr()
        plt.figure(figsize=(8, 6))
        sns.heatmap(corr_matrix, annot=True, fmt='.2f', cmap='coolwarm')
        plt.title('Correlation Matrix')
        plt.tight_layout()
        save_plot(plt.gcf(), 'correlation_matrix', plot_dir)
        plt.close()
        results['corr_matrix'] = corr_matrix

    except Exception as e:
        logging.error(f"Error in advanced statistical tests: {e}")

    return results
