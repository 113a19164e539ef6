# utils.py

import os
import logging

import pandas as pd

from config import EXTRA_DIRS


def create_directories(directories=EXTRA_DIRS):
    """Create necessary directories if they don't exist."""
    for directory in directories:
        if not os.path.exists(directory):
            os.makedirs(directory)
            logging.info(f"Created directory: {directory}")


def save_plot(fig, filename, plot_dir):
    """Save Matplotlib or Plotly figures."""
    try:
        os.makedirs(plot_dir, exist_ok=True)
        file_path = os.path.join(plot_dir, f"{filename}.png")
        if hasattr(fig, 'write_image'):
            # For Plotly figures
            fig.write_image(file_path)
        else:
            # For Matplotlib figures
            fig.savefig(file_path, bbox_inches='tight')
        logging.info(f"Plot saved: {file_path}")
        return file_path
    except Exception as e:
        logging.error(f"Error saving plot '{filename}': {e}")
        return None


def save_plotly_fig(fig, filename, plot_dir):
    """Save Plotly figure to an HTML file."""
    try:
        os.makedirs(plot_dir, exist_ok=True)
        file_path = os.path.join(plot_dir, f"{filename}.html")
        fig.write_html(file_path)
        logging.info(f"Plotly figure saved: {file_path}")
        return file_path
    except Exception as e:
        logging.error(f"Error saving Plotly figure '{filename}': {e}")
        return None


def merge_on_key(left: pd.DataFrame, right: pd.DataFrame, key: str, how: str = "left") -> pd.DataFrame:
    """
    Join two derived tables on ``key`` if both of them carry it.

    When the key is absent on either side the join is skipped: a warning
    names the key and the offending side, and ``left`` is returned unchanged.
    """
    absent = [side for side, df in (("left", left), ("right", right)) if key not in df.columns]
    if absent:
        logging.warning(
            f"Join key '{key}' not found in {' and '.join(absent)} table(s); "
            f"skipping merge. Add a '{key}' column to the input CSV to enable it."
        )
        return left
    if right[key].duplicated().any():
        logging.warning(f"Join key '{key}' is not unique in the right table; skipping merge.")
        return left
    return left.merge(right, on=key, how=how, validate="many_to_one")
