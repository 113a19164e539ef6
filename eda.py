# eda.py

import pandas as pd
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from matplotlib.ticker import ScalarFormatter
import seaborn as sns
import logging
import traceback
import os

from config import (
    BRAND_COL,
    FUEL_TYPE_COL,
    MILEAGE_COL,
    POWER_COL,
    PRICE_COL,
    YEAR_COL,
)
from statistical_tests import advanced_statistical_tests
from interactive_visualizations import interactive_visualizations


def perform_eda(data, plot_dir):
    """
    Perform exploratory data analysis, including:
      - Summary statistics and missing-value counts (logged)
      - Distributions of price, mileage and engine power
      - Count of cars per registration year
      - Price by brand and by fuel type
      - Correlation / ANOVA tests and interactive visualizations
    """
    try:
        logging.info("Starting EDA...")
        os.makedirs(plot_dir, exist_ok=True)

        log_summary(data)

        plot_distribution(data, PRICE_COL, 'Distribution of Car Prices', 'Price', plot_dir)
        plot_distribution(data, MILEAGE_COL, 'Distribution of Mileage', 'Mileage (km)', plot_dir)
        plot_distribution(data, POWER_COL, 'Distribution of Engine Power', 'Engine Power', plot_dir)
        plot_year_counts(data, plot_dir)
        plot_price_by_category(data, BRAND_COL, plot_dir)
        plot_price_by_category(data, FUEL_TYPE_COL, plot_dir)

        advanced_statistical_tests(data, plot_dir)
        interactive_visualizations(data, plot_dir)

        logging.info("EDA completed successfully.")

    except Exception as e:
        logging.error(f"Error in perform_eda: {e}")
        logging.error(traceback.format_exc())
        raise


def log_summary(data):
    """Log shape, describe() and missing counts of the working table."""
    logging.info(f"EDA dataset shape: {data.shape}")
    logging.info(f"Numeric summary:\n{data.describe().T}")
    missing = data.isna().sum()
    missing = missing[missing > 0]
    if not missing.empty:
        logging.info(f"Missing values per column:\n{missing}")


def plot_distribution(data, column, title, xlabel, plot_dir, bins=30):
    """Histogram with KDE of one numeric column."""
    if column not in data.columns:
        logging.warning(f"Cannot plot distribution of '{column}' (missing column).")
        return None

    plt.figure(figsize=(10, 6))
    sns.histplot(data[column].dropna(), bins=bins, kde=True)
    plt.title(title)
    plt.xlabel(xlabel)
    plt.ylabel('Frequency')

    # Keep the x-axis out of scientific notation
    ax = plt.gca()
    ax.xaxis.set_major_formatter(ScalarFormatter(useOffset=False))
    ax.ticklabel_format(style='plain', axis='x')
    plt.tight_layout()

    fname = os.path.join(plot_dir, f'distribution_{column}.png')
    plt.savefig(fname)
    plt.close()
    logging.info(f"Distribution of '{column}' saved => {fname}")
    return fname


def plot_year_counts(data, plot_dir):
    """Bar chart of listings per registration year."""
    if YEAR_COL not in data.columns:
        logging.warning("Cannot plot cars per year (missing column).")
        return None

    years = pd.to_numeric(data[YEAR_COL], errors='coerce').dropna().astype(int)
    plt.figure(figsize=(12, 6))
    sns.countplot(x=years, order=sorted(years.unique()))
    plt.title('Count of Cars by Year of First Registration')
    plt.xlabel('Year')
    plt.ylabel('Count')
    plt.xticks(rotation=45, ha='right')
    plt.tight_layout()

    fname = os.path.join(plot_dir, 'cars_per_year.png')
    plt.savefig(fname)
    plt.close()
    logging.info(f"Cars per year saved => {fname}")
    return fname


def plot_price_by_category(data, column, plot_dir):
    """Box plot of price per level of a categorical column, ordered by median."""
    if column not in data.columns or PRICE_COL not in data.columns:
        logging.warning(f"Cannot plot price by '{column}' (missing columns).")
        return None

    order = (
        data.groupby(column)[PRICE_COL]
        .median()
        .sort_values(ascending=False)
        .index.tolist()
    )
    plt.figure(figsize=(max(10, 0.5 * len(order)), 6))
    sns.boxplot(data=data, x=column, y=PRICE_COL, order=order)
    plt.xticks(rotation=45, ha='right')
    plt.title(f'Price by {column.replace("_", " ").title()}')
    plt.tight_layout()

    fname = os.path.join(plot_dir, f'price_by_{column}.png')
    plt.savefig(fname)
    plt.close()
    logging.info(f"Price by '{column}' saved => {fname}")
    return fname
