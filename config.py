"""Project configuration (single source of truth).

This file defines default paths, column names and modelling knobs used across
cleaning, EDA and regression. The raw CSV location can be overridden with the
CAR_PRICE_DATA environment variable or the --data CLI flag.
"""

import os

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

DATA_DIR = os.path.join(BASE_DIR, "data")
RAW_DATA_DIR = os.path.join(DATA_DIR, "raw")
INTERIM_DATA_DIR = os.path.join(DATA_DIR, "interim")

RAW_DATA_PATH = os.getenv("CAR_PRICE_DATA", os.path.join(RAW_DATA_DIR, "cars.csv"))
CLEANED_DATA_PATH = os.path.join(INTERIM_DATA_DIR, "cleaned_cars.csv")

PLOT_DIR = os.path.join(BASE_DIR, "plots")
REPORT_DIR = os.path.join(BASE_DIR, "reports")

# -------------------- Column contract -------------------- #
PRICE_COL = "price"
POWER_COL = "power"
MILEAGE_COL = "mileage"
YEAR_COL = "year"
FUEL_CONSUMPTION_COL = "fuel_consumption"
BRAND_COL = "brand"
MODEL_COL = "model"
TRANSMISSION_COL = "transmission_type"
FUEL_TYPE_COL = "fuel_type"

# Optional row identifier used to join residuals back onto the cleaned data
ID_COLUMN = "id"

FEATURE_COLUMNS = (POWER_COL, MILEAGE_COL, YEAR_COL, FUEL_CONSUMPTION_COL)
CATEGORICAL_COLUMNS = (BRAND_COL, MODEL_COL, TRANSMISSION_COL, FUEL_TYPE_COL)

# Variant used for k-fold cross-validation (numeric + low-cardinality dummies)
CV_CATEGORICAL_COLUMNS = (TRANSMISSION_COL, FUEL_TYPE_COL)

# -------------------- Encoding / modelling knobs -------------------- #
TOP_N_MODELS = 20
OTHER_LABEL = "Other"
UNKNOWN_LABEL = "Unknown"

# Drop one level per dummy group so the intercept stays identifiable
DROP_FIRST_CATEGORY = True

CV_FOLDS = 5
RANDOM_STATE = 42

EXTRA_DIRS = [
    DATA_DIR,
    RAW_DATA_DIR,
    INTERIM_DATA_DIR,
    PLOT_DIR,
    REPORT_DIR,
]
