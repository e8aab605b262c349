import sys

import numpy as np
import pandas as pd

START_YEAR, END_YEAR = 2021, 2032
SEED = 7

# Region -> countries covered by the demo dataset
REGIONS = {
    "North America": ["United States", "Canada", "Mexico"],
    "Europe": ["Germany", "France", "United Kingdom", "Italy", "Spain"],
    "Asia Pacific": ["China", "Japan", "India", "Australia", "South Korea"],
    "Latin America": ["Brazil", "Argentina", "Chile"],
    "Middle East & Africa": ["Saudi Arabia", "South Africa", "United Arab Emirates"],
}

# Segment dimension -> values (keep column names stable for the dashboard)
SEGMENTS = {
    "product_type": ["Slow Pyrolysis", "Fast Pyrolysis", "Gasification", "Hydrothermal Carbonization"],
    "source_material": ["Woody Biomass", "Agricultural Waste", "Animal Manure", "Municipal Waste"],
    "product_grade": ["Agricultural Grade", "Industrial Grade", "Activated Grade"],
    "form": ["Powder", "Granules", "Pellets"],
    "application": ["Soil Amendment", "Livestock Feed", "Water Treatment", "Carbon Sequestration", "Construction"],
    "distribution_channel": ["Direct Sales", "Distributors", "Online Retail"],
}

OUT_LONG = "market_data_long.csv"
OUT_SUMMARY = "market_summary_by_region.csv"


def generate_records(seed=SEED, start_year=START_YEAR, end_year=END_YEAR):
    """
    Deterministic demo market: one row per country x year x segment combination
    sampled from SEGMENTS. Values compound from a random base at a per-row
    growth rate. market_value_usd is in thousands of US$.
    """
    rng = np.random.default_rng(seed)
    years = np.arange(start_year, end_year + 1)
    rows = []
    for region, countries in REGIONS.items():
        for country in countries:
            # a handful of segment mixes per country
            for _ in range(6):
                combo = {col: values[rng.integers(len(values))] for col, values in SEGMENTS.items()}
                base = float(rng.uniform(2_000, 60_000))
                growth = float(rng.normal(0.08, 0.05))
                price = float(rng.uniform(300, 900))
                for k, yr in enumerate(years):
                    value = base * (1.0 + growth) ** k * float(rng.uniform(0.97, 1.03))
                    rows.append({
                        "region": region,
                        "country": country,
                        "year": int(yr),
                        **combo,
                        "market_value_usd": round(max(value, 0.0), 2),
                        "volume_units": int(max(value, 0.0) * 1000 / price),
                    })
    return pd.DataFrame(rows)


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    out_long = argv[0] if argv else OUT_LONG

    long_df = generate_records()
    long_df = long_df.sort_values(["region", "country", "year"]).reset_index(drop=True)

    summary = (
        long_df.groupby(["region", "year"], as_index=False)["market_value_usd"].sum()
               .pivot_table(index="region", columns="year", values="market_value_usd")
               .reset_index()
    )

    long_df.to_csv(out_long, index=False)
    summary.to_csv(OUT_SUMMARY, index=False)

    print("\n✅ Wrote:")
    print(f" - {out_long}   (region, country, year, segment columns, market_value_usd, volume_units)")
    print(f" - {OUT_SUMMARY}  (one row per region, value by year)")
    print(f"\nRows: {len(long_df):,}, years {START_YEAR}–{END_YEAR}")


if __name__ == "__main__":
    main()
