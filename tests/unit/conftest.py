import numpy as np
import pandas as pd
import pytest


def make_listings(n: int = 120, seed: int = 7, with_id: bool = True) -> pd.DataFrame:
    """Raw listings table as it would come out of the CSV (all text)."""
    rng = np.random.RandomState(seed)
    brands = ["Volkswagen", "Ford", "Skoda", "Opel"]
    models = [f"Model{chr(ord('A') + i)}" for i in range(25)]
    # skewed so that a handful of models are rare
    model_p = np.linspace(3.0, 0.2, len(models))
    model_p /= model_p.sum()

    power = rng.randint(60, 250, size=n)
    mileage = rng.randint(5_000, 250_000, size=n)
    year = rng.randint(2005, 2023, size=n)
    consumption = np.round(rng.uniform(3.5, 9.5, size=n), 1)
    transmission = rng.choice(["manual", "automatic"], size=n)
    fuel = rng.choice(["petrol", "diesel", "electric"], size=n)
    price = (
        12_000
        + 90 * power
        - 0.04 * mileage
        + 650 * (year - 2005)
        + np.where(transmission == "automatic", 1_500, 0)
        + rng.normal(0, 800, size=n)
    )

    df = pd.DataFrame(
        {
            "price": [f"{p:,.0f}" for p in price],
            "power": [f"{p} kW" for p in power],
            "mileage": [f"{m:,}" for m in mileage],
            "year": year.astype(str),
            "fuel_consumption": consumption.astype(str),
            "brand": rng.choice(brands, size=n),
            "model": rng.choice(models, size=n, p=model_p),
            "transmission_type": transmission,
            "fuel_type": fuel,
        }
    )
    if with_id:
        df.insert(0, "id", [f"car-{i:04d}" for i in range(n)])

    # a few broken cells of each kind
    df.loc[3, "price"] = "on request"
    df.loc[10, "price"] = "€ 12 500"
    df.loc[5, "power"] = "n/a"
    df.loc[8, "fuel_consumption"] = "2023"
    df.loc[12, "mileage"] = ""
    return df


@pytest.fixture
def raw_listings():
    return make_listings()


@pytest.fixture
def listings_csv(tmp_path):
    path = tmp_path / "cars.csv"
    make_listings().to_csv(path, index=False)
    return path
