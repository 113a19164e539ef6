# data_loading.py

import logging

import pandas as pd

from config import (
    BRAND_COL,
    FUEL_CONSUMPTION_COL,
    FUEL_TYPE_COL,
    MILEAGE_COL,
    MODEL_COL,
    POWER_COL,
    PRICE_COL,
    TRANSMISSION_COL,
    YEAR_COL,
)
from errors import MissingColumnsError

REQUIRED_COLUMNS = (
    PRICE_COL,
    POWER_COL,
    MILEAGE_COL,
    YEAR_COL,
    FUEL_CONSUMPTION_COL,
    BRAND_COL,
    MODEL_COL,
    TRANSMISSION_COL,
    FUEL_TYPE_COL,
)

# Lower-cased header spellings seen in listing exports -> canonical name
_ALIAS_MAP = {
    "price": PRICE_COL,
    "price (eur)": PRICE_COL,
    "selling_price": PRICE_COL,
    "power": POWER_COL,
    "engine_power": POWER_COL,
    "power (kw)": POWER_COL,
    "mileage": MILEAGE_COL,
    "km": MILEAGE_COL,
    "kilometers": MILEAGE_COL,
    "odometer": MILEAGE_COL,
    "year": YEAR_COL,
    "first_registration": YEAR_COL,
    "registration_year": YEAR_COL,
    "fuel_consumption": FUEL_CONSUMPTION_COL,
    "fuel consumption": FUEL_CONSUMPTION_COL,
    "fuel-consumption": FUEL_CONSUMPTION_COL,
    "consumption": FUEL_CONSUMPTION_COL,
    "brand": BRAND_COL,
    "make": BRAND_COL,
    "manufacturer": BRAND_COL,
    "model": MODEL_COL,
    "transmission_type": TRANSMISSION_COL,
    "transmission type": TRANSMISSION_COL,
    "transmission-type": TRANSMISSION_COL,
    "transmission": TRANSMISSION_COL,
    "gearbox": TRANSMISSION_COL,
    "fuel_type": FUEL_TYPE_COL,
    "fuel type": FUEL_TYPE_COL,
    "fuel-type": FUEL_TYPE_COL,
    "fuel": FUEL_TYPE_COL,
}


def _apply_alias_mapping(df: pd.DataFrame, alias_map: dict[str, str]) -> pd.DataFrame:
    """Rename alias columns to canonical names and merge duplicate information."""
    work = df.copy()
    for col in list(work.columns):
        canonical = alias_map.get(str(col).strip().lower())
        if canonical is None or col == canonical:
            continue
        if canonical in work.columns:
            work[canonical] = work[canonical].combine_first(work[col])
            work = work.drop(columns=[col])
        else:
            work = work.rename(columns={col: canonical})
    return work


def check_required_columns(df: pd.DataFrame, required=REQUIRED_COLUMNS, stage: str = "input") -> None:
    """Raise MissingColumnsError naming every required column that is absent."""
    missing = set(required) - set(df.columns)
    if missing:
        raise MissingColumnsError(missing, stage=stage)


def load_data(file_path, required=REQUIRED_COLUMNS):
    """Load the car listings CSV and canonicalise its header."""
    try:
        data = pd.read_csv(file_path, encoding='utf-8-sig', dtype=str, keep_default_na=True)
    except FileNotFoundError:
        logging.error(f"File not found at path: {file_path}")
        raise
    logging.info(f"Data loaded successfully from {file_path}")
    logging.info(f"Columns in loaded data: {data.columns.tolist()}")

    data = _apply_alias_mapping(data, _ALIAS_MAP)
    check_required_columns(data, required)
    logging.info(f"Loaded {len(data):,} rows with columns {data.columns.tolist()}")
    return data
