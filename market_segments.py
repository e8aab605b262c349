# market_segments.py
# Turns long-format market records into bubble items for one segment dimension.

from __future__ import annotations

import logging
from enum import Enum
from typing import List

import numpy as np
import pandas as pd

from bubble_layout import BubbleItem

logger = logging.getLogger(__name__)

RECORD_COLUMNS = {"region", "country", "year", "market_value_usd", "volume_units"}

# incremental opportunity used when an item has none
FALLBACK_WEIGHT = 1000.0
INDEX_SCALE = 10.0


class UnknownSegmentError(ValueError):
    pass


class SegmentType(Enum):
    PYROLYSIS_METHOD = ("pyrolysisMethod", "product_type", "By Pyrolysis Method")
    SOURCE_MATERIAL = ("sourceMaterial", "source_material", "By Source Material")
    PRODUCT_GRADE = ("productGrade", "product_grade", "By Product Grade")
    FORM = ("form", "form", "By Form")
    APPLICATION = ("application", "application", "By Application")
    DISTRIBUTION_CHANNEL = ("distributionChannel", "distribution_channel", "By Distribution Channel")

    def __init__(self, key, column, label):
        self.key = key
        self.column = column
        self.label = label


SEGMENT_COLUMNS = {seg.column for seg in SegmentType}


def parse_segment(name) -> SegmentType:
    """Accept a SegmentType, its key ("sourceMaterial") or member name ("SOURCE_MATERIAL")."""
    if isinstance(name, SegmentType):
        return name
    for seg in SegmentType:
        if name in (seg.key, seg.name):
            return seg
    raise UnknownSegmentError(f"Unknown segment type: {name!r}")


def segment_options():
    return [{"label": seg.label, "value": seg.key} for seg in SegmentType]


# -----------------------------
# Filters
# -----------------------------
def filter_records(df, regions=None, countries=None, segment_values=None):
    """
    Keep rows matching every non-empty filter. segment_values maps a segment
    (key, member name or SegmentType) to the values to keep for its column.
    """
    out = df
    if regions:
        out = out[out["region"].isin(list(regions))]
    if countries:
        out = out[out["country"].isin(list(countries))]
    for segment, values in (segment_values or {}).items():
        if values:
            out = out[out[parse_segment(segment).column].isin(list(values))]
    return out


def country_options(df, regions=None) -> List[str]:
    d = filter_records(df, regions=regions)
    return sorted(d["country"].dropna().unique().tolist())


def segment_value_options(df, segment) -> List[str]:
    """Distinct non-empty values of one segment column, sorted."""
    col = df[parse_segment(segment).column].dropna().astype(str)
    return sorted(v for v in col.unique().tolist() if v.strip())


# -----------------------------
# Metrics
# -----------------------------
def segment_metrics(df, segment, start_year=2025, end_year=2032):
    """
    One row per segment value (first-appearance order) with columns
    item, cagr (%), market_share (%), incremental_opportunity (US$ Mn).

    Only records from start_year..end_year (inclusive) count, for the share
    totals as well. Values are averaged over the records of the start and end
    years; CAGR is 0 when either average is not positive and never negative.
    """
    seg = parse_segment(segment)
    cols = ["item", "cagr", "market_share", "incremental_opportunity"]
    if df.empty or seg.column not in df.columns:
        return pd.DataFrame(columns=cols)

    d = df[[seg.column, "year", "market_value_usd"]].copy()
    d["year"] = pd.to_numeric(d["year"], errors="coerce").to_numpy(dtype=float, na_value=np.nan)
    d = d[(d["year"] >= start_year) & (d["year"] <= end_year)].copy()
    d["value"] = pd.to_numeric(d["market_value_usd"], errors="coerce").fillna(0.0) / 1000.0
    total = float(d["value"].sum())

    keys = d[seg.column]
    d = d[keys.notna() & (keys.astype(str).str.strip() != "")]
    if d.empty:
        return pd.DataFrame(columns=cols)

    n_years = end_year - start_year
    rows = []
    for item, g in d.groupby(seg.column, sort=False):
        start_vals = g.loc[g["year"] == start_year, "value"]
        end_vals = g.loc[g["year"] == end_year, "value"]
        start = float(start_vals.mean()) if not start_vals.empty else 0.0
        end = float(end_vals.mean()) if not end_vals.empty else 0.0

        cagr = 0.0
        if start > 0 and end > 0 and n_years > 0:
            cagr = ((end / start) ** (1.0 / n_years) - 1.0) * 100.0
        rows.append({
            "item": str(item),
            "cagr": max(0.0, cagr),
            "market_share": float(g["value"].sum()) / total * 100.0 if total > 0 else 0.0,
            "incremental_opportunity": abs(end - start),
        })
    return pd.DataFrame(rows, columns=cols)


def _index_scale(values):
    """Min-max to 0..10; spread evenly by position when every value is equal."""
    lo, hi = float(np.min(values)), float(np.max(values))
    if hi - lo > 0:
        return (values - lo) / (hi - lo) * INDEX_SCALE
    n = len(values)
    return np.arange(n, dtype=float) / max(1, n - 1) * INDEX_SCALE


def build_bubble_items(df, segment, start_year=2025, end_year=2032) -> List[BubbleItem]:
    metrics = segment_metrics(df, segment, start_year, end_year)
    if metrics.empty:
        return []

    cagr_index = _index_scale(metrics["cagr"].to_numpy(dtype=float))
    share_index = _index_scale(metrics["market_share"].to_numpy(dtype=float))

    items = []
    for i, row in enumerate(metrics.itertuples(index=False)):
        # tiny index-based nudges so no two items start on the same spot
        x = float(cagr_index[i]) + (i % 10) * 0.01
        y = float(share_index[i]) + ((i * 7) % 10) * 0.01
        items.append(BubbleItem(
            label=row.item,
            x_metric=x,
            y_metric=y,
            weight=float(row.incremental_opportunity) or FALLBACK_WEIGHT,
            color_index=i,
            description=f"CAGR {row.cagr:.1f}% · share {row.market_share:.1f}%",
        ))
    logger.debug("built %d bubble items for %s", len(items), parse_segment(segment).key)
    return items
