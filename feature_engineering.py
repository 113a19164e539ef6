#!/usr/bin/env python3
"""
feature_engineering.py

Categorical handling for the regression design matrix
  • Frequency-capped vocabulary: top-N levels kept, the rest relabelled "Other"
  • Dense one-hot indicators via pandas.get_dummies (optionally drop-first)
  • Inverse mapping from indicator block back to the category label
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import List, Sequence

import pandas as pd

from config import OTHER_LABEL, TOP_N_MODELS, UNKNOWN_LABEL
from errors import MissingColumnsError

__all__ = [
    "top_n_levels",
    "collapse_rare_categories",
    "collapse_categories",
    "one_hot_encode",
    "indicator_columns",
    "decode_one_hot",
]
log = logging.getLogger(__name__)


def top_n_levels(series: pd.Series, top_n: int) -> List:
    """Return the ``top_n`` most frequent non-missing values.

    Ties are broken by first appearance in the series so the result does not
    depend on hash or sort-algorithm order.
    """
    if top_n < 0:
        raise ValueError(f"top_n must be non-negative, got {top_n}")
    counts = Counter(series.dropna())  # insertion order == first-seen order
    ranked = sorted(counts, key=lambda level: -counts[level])  # stable
    return ranked[:top_n]


def collapse_rare_categories(
    series: pd.Series,
    top_n: int = TOP_N_MODELS,
    other_label: str = OTHER_LABEL,
) -> pd.Series:
    """Keep the ``top_n`` most frequent values and relabel everything else.

    Missing values are relabelled as well, so the result has at most
    ``top_n + 1`` distinct values and no gaps.
    """
    keep = top_n_levels(series, top_n)
    return series.where(series.isin(keep), other_label).astype(object)


def collapse_categories(
    data: pd.DataFrame,
    column: str,
    top_n: int = TOP_N_MODELS,
    other_label: str = OTHER_LABEL,
) -> pd.DataFrame:
    """DataFrame stage around :func:`collapse_rare_categories`."""
    if column not in data.columns:
        raise MissingColumnsError({column}, stage="category collapse")
    df = data.copy()
    n_before = df[column].nunique(dropna=True)
    df[column] = collapse_rare_categories(df[column], top_n, other_label)
    n_other = int((df[column] == other_label).sum())
    log.info(
        "Collapsed '%s' from %d to %d levels (%d rows relabelled '%s')",
        column, n_before, df[column].nunique(), n_other, other_label,
    )
    return df


def one_hot_encode(
    data: pd.DataFrame,
    columns: Sequence[str],
    *,
    drop_first: bool = False,
    unknown_label: str = UNKNOWN_LABEL,
    prefix_sep: str = "_",
) -> pd.DataFrame:
    """Replace each categorical column with 0/1 indicator columns.

    Indicators are named ``<column><prefix_sep><level>`` and ordered by level.
    Missing values are encoded as ``unknown_label`` so every row has exactly
    one active indicator per source column (or none, for the dropped baseline
    level when ``drop_first`` is set).
    """
    columns = list(columns)
    missing = set(columns) - set(data.columns)
    if missing:
        raise MissingColumnsError(missing, stage="one-hot encoding")
    if not columns:
        return data.copy()

    work = data.copy()
    for col in columns:
        work[col] = work[col].fillna(unknown_label).astype(str)

    encoded = pd.get_dummies(
        work,
        columns=columns,
        prefix=columns,
        prefix_sep=prefix_sep,
        drop_first=drop_first,
        dtype=int,
    )
    log.info(
        "One-hot encoded %s -> %d indicator columns (drop_first=%s)",
        columns, encoded.shape[1] - (work.shape[1] - len(columns)), drop_first,
    )
    return encoded


def indicator_columns(encoded: pd.DataFrame, column: str, prefix_sep: str = "_") -> List[str]:
    prefix = f"{column}{prefix_sep}"
    return [c for c in encoded.columns if str(c).startswith(prefix)]


def decode_one_hot(
    encoded: pd.DataFrame,
    column: str,
    *,
    baseline: str | None = None,
    prefix_sep: str = "_",
) -> pd.Series:
    """Rebuild the category label of every row from its indicator block.

    ``baseline`` is the level removed by ``drop_first``; rows with no active
    indicator decode to it. Without a baseline such rows are an error.
    """
    cols = indicator_columns(encoded, column, prefix_sep)
    if not cols:
        raise MissingColumnsError({column}, stage="one-hot decoding")

    block = encoded[cols]
    active = block.sum(axis=1)
    if (active > 1).any():
        raise ValueError(f"Indicators for '{column}' are not mutually exclusive")
    if baseline is None and (active == 0).any():
        raise ValueError(
            f"Rows without an active '{column}' indicator; pass the dropped baseline level"
        )

    prefix_len = len(column) + len(prefix_sep)
    labels = block.idxmax(axis=1).astype(str).str.slice(prefix_len)
    if baseline is not None:
        labels = labels.where(active == 1, baseline)
    return labels.rename(column)
