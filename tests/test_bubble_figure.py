from __future__ import annotations

import pytest

from bubble_figure import empty_figure, make_bubble_figure, palette
from bubble_layout import BubbleItem, layout


@pytest.fixture
def result():
    return layout([
        BubbleItem("Powder", 1.0, 2.0, 10.0, description="CAGR 4.0%"),
        BubbleItem("Granules", 4.0, 6.0, 40.0),
        BubbleItem("Pellets", 8.0, 3.0, 25.0, color_index=12),
    ])


def test_one_trace_per_bubble(result):
    fig = make_bubble_figure(result, x_label="CAGR Index", y_label="Market Share Index")
    assert [t.name for t in fig.data] == ["Powder", "Granules", "Pellets"]
    for trace, item in zip(fig.data, result.items):
        assert trace.x == (item.x,)
        assert trace.y == (item.y,)
        assert trace.marker.size == item.size
        assert trace.marker.sizemode == "diameter"


def test_axis_ranges_follow_domains(result):
    fig = make_bubble_figure(result)
    assert tuple(fig.layout.xaxis.range) == pytest.approx(result.x_domain)
    assert tuple(fig.layout.yaxis.range) == pytest.approx(result.y_domain)


def test_highlight_gets_heavier_outline(result):
    fig = make_bubble_figure(result)
    widths = [t.marker.line.width for t in fig.data]
    assert widths == [1.5, 3, 1.5]


def test_colors_wrap_around_palette(result):
    colors = palette("Plotly")
    fig = make_bubble_figure(result, palette_name="Plotly")
    assert fig.data[0].marker.color == colors[0]
    assert fig.data[2].marker.color == colors[12 % len(colors)]


def test_unknown_palette_falls_back():
    assert palette("NoSuchPalette") == palette("Plotly")


def test_hover_shows_original_metrics(result):
    fig = make_bubble_figure(result, x_label="CAGR Index")
    assert fig.data[0].customdata[0][0] == 1.0
    assert "CAGR Index" in fig.data[0].hovertemplate
    assert "CAGR 4.0%" in fig.data[0].hovertemplate


def test_footnote_annotation(result):
    fig = make_bubble_figure(result, footnote="*Size of bubble indicates incremental opportunity")
    assert [a.text for a in fig.layout.annotations] == ["*Size of bubble indicates incremental opportunity"]


def test_empty_layout_renders_placeholder():
    fig = make_bubble_figure(layout([]))
    assert len(fig.data) == 0
    assert fig.layout.annotations[0].text == "No data available"
    assert empty_figure("nothing").layout.annotations[0].text == "nothing"
