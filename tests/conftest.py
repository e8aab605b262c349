import pandas as pd
import pytest


def _row(region, country, year, product_type, value, **extra):
    row = {
        "region": region,
        "country": country,
        "year": year,
        "product_type": product_type,
        "source_material": "Woody Biomass",
        "product_grade": "Industrial Grade",
        "form": "Powder",
        "application": "Soil Amendment",
        "distribution_channel": "Direct Sales",
        "market_value_usd": value,
        "volume_units": 10,
    }
    row.update(extra)
    return row


@pytest.fixture
def records():
    """Two product types in two regions; values are thousands of US$."""
    return pd.DataFrame([
        _row("North America", "United States", 2025, "Slow Pyrolysis", 1000.0),
        _row("North America", "United States", 2032, "Slow Pyrolysis", 2000.0),
        _row("Europe", "Germany", 2025, "Fast Pyrolysis", 1000.0, form="Pellets"),
        _row("Europe", "Germany", 2032, "Fast Pyrolysis", 1000.0, form="Pellets"),
    ])
