from __future__ import annotations

import pandas as pd

from bubble_layout import layout
from market_segments import RECORD_COLUMNS, SEGMENT_COLUMNS, build_bubble_items
from prepare_market_dataset import SEGMENTS, generate_records, main


def test_generated_records_are_deterministic():
    a = generate_records(seed=3)
    b = generate_records(seed=3)
    pd.testing.assert_frame_equal(a, b)
    assert (RECORD_COLUMNS | SEGMENT_COLUMNS) <= set(a.columns)
    assert a["year"].min() <= 2025 and a["year"].max() >= 2032


def test_generated_records_feed_the_layout():
    df = generate_records()
    items = build_bubble_items(df, "pyrolysisMethod")
    assert {it.label for it in items} <= set(SEGMENTS["product_type"])
    result = layout(items)
    assert sum(it.is_highlight for it in result.items) == 1


def test_main_writes_csv(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    main(["long.csv"])
    df = pd.read_csv(tmp_path / "long.csv")
    assert not df.empty
    assert (tmp_path / "market_summary_by_region.csv").exists()
