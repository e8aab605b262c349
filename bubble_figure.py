# bubble_figure.py
# Plotly rendering of a bubble layout.

from __future__ import annotations

import plotly.express as px
import plotly.graph_objects as go

from bubble_layout import LayoutResult


def palette(name="Plotly"):
    colors = getattr(px.colors.qualitative, name, None)
    return list(colors) if colors else list(px.colors.qualitative.Plotly)


def empty_figure(msg: str):
    fig = go.Figure()
    fig.add_annotation(text=msg, showarrow=False, xref="paper", yref="paper", x=0.5, y=0.5)
    fig.update_layout(
        xaxis=dict(visible=False),
        yaxis=dict(visible=False),
        margin=dict(l=40, r=20, t=40, b=40),
    )
    return fig


def make_bubble_figure(result: LayoutResult, x_label="X", y_label="Y", title=None,
                       footnote=None, palette_name="Plotly", weight_label="Weight"):
    """
    One scatter trace per bubble so the legend lists every label. Markers are
    drawn at the laid-out (x, y) with diameter = size; hover shows the
    original metrics, not the displaced position.
    """
    if not result.items:
        return empty_figure("No data available")

    colors = palette(palette_name)
    fig = go.Figure()
    for item in result.items:
        color = colors[item.color_index % len(colors)]
        extra = f"<br><i>{item.description}</i>" if item.description else ""
        fig.add_trace(go.Scatter(
            x=[item.x],
            y=[item.y],
            mode="markers",
            name=item.label,
            marker=dict(
                size=item.size,
                sizemode="diameter",
                color=color,
                opacity=0.85,
                line=dict(color="#1f2d3d" if item.is_highlight else color,
                          width=3 if item.is_highlight else 1.5),
            ),
            customdata=[[item.x_metric, item.y_metric, item.weight]],
            hovertemplate=(
                f"<b>{item.label}</b><br>"
                f"{x_label}: %{{customdata[0]:.2f}}<br>"
                f"{y_label}: %{{customdata[1]:.2f}}<br>"
                f"{weight_label}: %{{customdata[2]:,.1f}}"
                f"{extra}<extra></extra>"
            ),
        ))

    fig.update_layout(
        title=title,
        xaxis=dict(title=x_label, range=list(result.x_domain), tickformat=".1f", zeroline=False),
        yaxis=dict(title=y_label, range=list(result.y_domain), tickformat=".1f", zeroline=False),
        legend=dict(orientation="h", yanchor="top", y=-0.18, xanchor="center", x=0.5),
        margin=dict(l=100, r=60, t=60, b=100),
        hovermode="closest",
    )
    if footnote:
        fig.add_annotation(text=footnote, showarrow=False, xref="paper", yref="paper",
                           x=0.5, y=-0.32, font=dict(size=10))
    return fig
