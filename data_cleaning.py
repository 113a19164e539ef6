# data_cleaning.py

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np
import pandas as pd

from config import (
    CATEGORICAL_COLUMNS,
    FEATURE_COLUMNS,
    FUEL_CONSUMPTION_COL,
    PRICE_COL,
)
from errors import EmptyNumericColumnError, MissingColumnsError, ModelFitError

__all__ = [
    "SentinelFix",
    "SENTINEL_FIXES",
    "parse_price",
    "parse_numeric",
    "normalize_price_series",
    "clean_price",
    "clean_features",
    "normalize_categoricals",
]

_THOUSANDS_SEPARATOR = re.compile(r",")
# "12 000" -> "12000"; spaces not between two digits are left alone
_DIGIT_GROUP_SPACE = re.compile(r"(?<=\d)\s+(?=\d)")
# a dot only counts as decimal point with digits on both sides ("Rs." does not)
_PRICE_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")

# "150 kW", "120,000 km", "5.6 l/100km" -> leading number, unit text ignored
_LEADING_NUMBER = re.compile(
    r"^\s*([-+]?(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?)(?:\s*[A-Za-z%/].*)?$"
)


@dataclass(frozen=True, slots=True)
class SentinelFix:
    """A known bad literal in one column that must be treated as missing."""

    name: str
    column: str
    value: float
    reason: str = ""


# Listings export writes the registration year into the consumption field for
# some rows; 2023.0 l/100km is never a real reading.
SENTINEL_FIXES: tuple[SentinelFix, ...] = (
    SentinelFix(
        name="fuel_consumption_year_leak",
        column=FUEL_CONSUMPTION_COL,
        value=2023.0,
        reason="registration year written into fuel_consumption",
    ),
)


def _finite_or_none(value: float) -> float | None:
    return value if math.isfinite(value) else None


def parse_price(val) -> float | None:
    """Parse one raw price cell; None marks a value that could not be read.

    Thousands separators and digit-group spaces are removed first, then the
    single number left in the text is read, whatever currency or unit
    decoration surrounds it ("Rs. 5,00,000" -> 500000.0, "12 000 €" ->
    12000.0). Text with no number, or with several ("9,000 - 9,500"), is None.
    """
    if val is None:
        return None
    if isinstance(val, (int, float, np.integer, np.floating)) and not isinstance(val, bool):
        return _finite_or_none(float(val))
    text = _THOUSANDS_SEPARATOR.sub("", str(val))
    text = _DIGIT_GROUP_SPACE.sub("", text)
    numbers = _PRICE_NUMBER.findall(text)
    if len(numbers) != 1:
        return None
    return _finite_or_none(float(numbers[0]))


def parse_numeric(val) -> float | None:
    """Parse one raw predictor cell ("150 kW", "120,000") or return None."""
    if val is None:
        return None
    if isinstance(val, (int, float, np.integer, np.floating)) and not isinstance(val, bool):
        return _finite_or_none(float(val))
    text = str(val).strip()
    if not text:
        return None
    try:
        return _finite_or_none(float(text))
    except ValueError:
        pass
    m = _LEADING_NUMBER.match(text)
    if m is None:
        return None
    return _finite_or_none(float(m.group(1).replace(",", "")))


def normalize_price_series(values: Iterable, column: str = PRICE_COL) -> pd.Series:
    """
    Convert raw price strings to floats, imputing failures with the mean.

    The output has the same length, order and index as the input. Cells that
    fail to parse receive the arithmetic mean of the cells that did parse.

    Raises:
        EmptyNumericColumnError: if no cell parses, since the mean is undefined.
    """
    series = values if isinstance(values, pd.Series) else pd.Series(list(values), name=column)
    parsed = [parse_price(v) for v in series]
    valid = [v for v in parsed if v is not None]
    if not valid:
        raise EmptyNumericColumnError(column)

    mean_value = float(np.mean(valid))
    n_missing = len(parsed) - len(valid)
    if n_missing:
        logging.info(
            f"Imputed {n_missing:,} unparseable '{column}' value(s) with mean {mean_value:.2f}"
        )
    return pd.Series(
        [mean_value if v is None else v for v in parsed],
        index=series.index,
        name=series.name,
        dtype=float,
    )


def clean_price(
    data: pd.DataFrame,
    column: str = PRICE_COL,
    essential: Sequence[str] = (PRICE_COL,),
) -> pd.DataFrame:
    """Normalise the price column and drop rows still missing an essential field."""
    missing = ({column} | set(essential)) - set(data.columns)
    if missing:
        raise MissingColumnsError(missing, stage="price cleaning")

    df = data.copy()
    df[column] = normalize_price_series(df[column], column=column)

    before = len(df)
    df = df.dropna(subset=list(essential))
    dropped = before - len(df)
    logging.info(
        f"Price cleaning: {before:,} rows in, {len(df):,} rows out ({dropped:,} dropped)"
    )
    return df


def clean_features(
    data: pd.DataFrame,
    columns: Sequence[str] = FEATURE_COLUMNS,
    sentinels: Sequence[SentinelFix] = SENTINEL_FIXES,
) -> pd.DataFrame:
    """
    Coerce predictor columns to float and drop incomplete rows.

    Each column is parsed cell by cell; unreadable cells become missing.
    Sentinel fixes for a selected column then null out their exact trigger
    value. Any row with a missing selected feature is removed (no imputation
    on this path, unlike the price column).

    Raises:
        MissingColumnsError: a selected column is not in ``data``.
        EmptyNumericColumnError: a selected column has no valid value left.
        ModelFitError: every row lost at least one feature.
    """
    columns = list(columns)
    missing = set(columns) - set(data.columns)
    if missing:
        raise MissingColumnsError(missing, stage="feature cleaning")

    df = data.copy()
    for col in columns:
        df[col] = df[col].map(parse_numeric).astype(float)
        logging.info(
            f"Converted '{col}' to numeric. NaN count: {int(df[col].isna().sum())}"
        )

    for fix in sentinels:
        if fix.column not in columns:
            continue
        mask = df[fix.column] == fix.value
        hits = int(mask.sum())
        if hits:
            df.loc[mask, fix.column] = np.nan
            logging.warning(
                f"Sentinel fix '{fix.name}': nulled {hits:,} '{fix.column}' value(s) equal to {fix.value}"
            )

    if len(df):
        for col in columns:
            if df[col].isna().all():
                raise EmptyNumericColumnError(col)

    before = len(df)
    df = df.dropna(subset=columns)
    logging.info(
        f"Feature cleaning: {before:,} rows in, {len(df):,} rows out "
        f"({before - len(df):,} with missing features dropped)"
    )
    if before and df.empty:
        raise ModelFitError(
            f"No row has a valid value for every feature in {columns}"
        )
    return df


def normalize_categoricals(
    data: pd.DataFrame, columns: Sequence[str] = CATEGORICAL_COLUMNS
) -> pd.DataFrame:
    """Strip and collapse whitespace in categorical columns; blanks become missing."""
    df = data.copy()
    for col in columns:
        if col not in df.columns:
            logging.warning(f"Categorical column '{col}' not found; skipping normalization.")
            continue
        df[col] = (
            df[col]
            .astype("string")
            .str.strip()
            .str.replace(r"\s+", " ", regex=True)
            .replace("", pd.NA)
            .astype(object)
            .where(lambda s: s.notna(), np.nan)
        )
    return df
