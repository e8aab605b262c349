from __future__ import annotations

import pandas as pd
import pytest

from market_segments import (
    FALLBACK_WEIGHT,
    SegmentType,
    UnknownSegmentError,
    build_bubble_items,
    country_options,
    filter_records,
    parse_segment,
    segment_metrics,
    segment_options,
    segment_value_options,
)


def test_parse_segment_accepts_key_name_and_member():
    assert parse_segment("sourceMaterial") is SegmentType.SOURCE_MATERIAL
    assert parse_segment("SOURCE_MATERIAL") is SegmentType.SOURCE_MATERIAL
    assert parse_segment(SegmentType.FORM) is SegmentType.FORM


@pytest.mark.parametrize("name", ["region", "", None, "bladeMaterial"])
def test_parse_segment_rejects_unknown(name):
    with pytest.raises(UnknownSegmentError):
        parse_segment(name)


def test_unknown_segment_is_a_value_error():
    assert issubclass(UnknownSegmentError, ValueError)


def test_segment_options_cover_every_segment():
    opts = segment_options()
    assert [o["value"] for o in opts] == [s.key for s in SegmentType]
    assert opts[0]["label"] == "By Pyrolysis Method"


def test_filters(records):
    assert len(filter_records(records)) == 4
    assert set(filter_records(records, regions=["Europe"])["country"]) == {"Germany"}
    assert filter_records(records, regions=["Europe"], countries=["United States"]).empty
    assert country_options(records) == ["Germany", "United States"]
    assert country_options(records, ["North America"]) == ["United States"]


def test_segment_metrics(records):
    m = segment_metrics(records, "pyrolysisMethod")
    assert m["item"].tolist() == ["Slow Pyrolysis", "Fast Pyrolysis"]

    slow, fast = m.iloc[0], m.iloc[1]
    assert slow["cagr"] == pytest.approx((2.0 ** (1 / 7) - 1) * 100)
    assert fast["cagr"] == 0.0
    assert slow["market_share"] == pytest.approx(60.0)
    assert fast["market_share"] == pytest.approx(40.0)
    assert slow["incremental_opportunity"] == pytest.approx(1.0)
    assert fast["incremental_opportunity"] == 0.0


def test_shrinking_segment_has_zero_cagr_and_positive_opportunity(records):
    records.loc[records.index[-1], "market_value_usd"] = 500.0
    fast = segment_metrics(records, SegmentType.PYROLYSIS_METHOD).iloc[1]
    assert fast["cagr"] == 0.0
    assert fast["incremental_opportunity"] == pytest.approx(0.5)


def test_build_bubble_items(records):
    slow, fast = build_bubble_items(records, "pyrolysisMethod")
    assert (slow.label, fast.label) == ("Slow Pyrolysis", "Fast Pyrolysis")
    assert slow.x_metric == pytest.approx(10.0)
    assert slow.y_metric == pytest.approx(10.0)
    # index nudges: x + (i % 10) * 0.01, y + ((i * 7) % 10) * 0.01
    assert fast.x_metric == pytest.approx(0.01)
    assert fast.y_metric == pytest.approx(0.07)
    assert slow.weight == pytest.approx(1.0)
    assert fast.weight == FALLBACK_WEIGHT
    assert (slow.color_index, fast.color_index) == (0, 1)


def test_equal_metrics_spread_evenly(records):
    items = build_bubble_items(records, "sourceMaterial")
    assert len(items) == 1

    df = pd.concat([records, records.assign(source_material="Agricultural Waste"),
                    records.assign(source_material="Animal Manure")], ignore_index=True)
    items = build_bubble_items(df, "sourceMaterial")
    assert [round(it.x_metric, 6) for it in items] == [0.0, 5.01, 10.02]


def test_missing_segment_values_are_dropped_but_counted(records):
    records.loc[0, "form"] = None
    records.loc[1, "form"] = "  "
    m = segment_metrics(records, "form")
    assert m["item"].tolist() == ["Pellets"]
    assert m.iloc[0]["market_share"] == pytest.approx(40.0)


def test_empty_frame_gives_no_items(records):
    assert build_bubble_items(records.iloc[0:0], "form") == []


def test_share_counts_only_the_cagr_window(records):
    early = records.iloc[[0]].assign(year=2021, market_value_usd=5000.0)
    late = records.iloc[[2]].assign(year=2033, market_value_usd=9000.0)
    df = pd.concat([records, early, late], ignore_index=True)

    m = segment_metrics(df, "pyrolysisMethod")
    assert m["market_share"].tolist() == pytest.approx([60.0, 40.0])
    assert m.iloc[0]["cagr"] == pytest.approx((2.0 ** (1 / 7) - 1) * 100)


def test_window_follows_start_and_end_year(records):
    df = pd.concat([records, records.iloc[[0]].assign(year=2021, market_value_usd=5000.0)],
                   ignore_index=True)
    m = segment_metrics(df, "pyrolysisMethod", start_year=2021, end_year=2032)
    # Slow: 1 + 2 + 5 of 10 Mn
    assert m.iloc[0]["market_share"] == pytest.approx(80.0)


def test_filter_by_segment_values(records):
    d = filter_records(records, segment_values={"form": ["Pellets"]})
    assert set(d["country"]) == {"Germany"}

    d = filter_records(records, segment_values={SegmentType.PYROLYSIS_METHOD: ["Slow Pyrolysis"],
                                                "FORM": ["Powder", "Pellets"]})
    assert set(d["product_type"]) == {"Slow Pyrolysis"}

    # empty selections keep everything
    assert len(filter_records(records, segment_values={"form": [], "application": None})) == 4
    assert filter_records(records, regions=["Europe"], segment_values={"form": ["Powder"]}).empty


def test_filter_by_unknown_segment_raises(records):
    with pytest.raises(UnknownSegmentError):
        filter_records(records, segment_values={"bladeMaterial": ["x"]})


def test_segment_value_options(records):
    records.loc[0, "form"] = None
    records.loc[1, "form"] = " "
    assert segment_value_options(records, "form") == ["Pellets"]
    assert segment_value_options(records, SegmentType.PYROLYSIS_METHOD) == ["Fast Pyrolysis", "Slow Pyrolysis"]
