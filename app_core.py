# app_core.py
# Market Attractiveness dashboard with hot-reload of layout_settings.py

import importlib
import logging
import os
import sys
from pathlib import Path

import pandas as pd
from dash import Dash, dcc, html, Input, Output, State, exceptions

from bubble_figure import empty_figure, make_bubble_figure
from bubble_layout import LayoutParams, layout
from market_segments import (
    RECORD_COLUMNS,
    SEGMENT_COLUMNS,
    SegmentType,
    UnknownSegmentError,
    build_bubble_items,
    country_options,
    filter_records,
    parse_segment,
    segment_options,
    segment_value_options,
)

logger = logging.getLogger(__name__)

DATA_LONG_PATH = Path(os.environ.get("MARKET_DATA_PATH", "market_data_long.csv"))
SETTINGS_FILE = os.environ.get("BUBBLE_SETTINGS_FILE")


# -----------------------------
# Helpers
# -----------------------------
def _load_module_from_file(py_path, alias="layout_settings_override"):
    import importlib.util
    from importlib.machinery import SourceFileLoader

    if not os.path.exists(py_path):
        raise FileNotFoundError(f"Settings file not found: {py_path}")
    if os.path.isdir(py_path):
        raise IsADirectoryError(f"Expected a file, found directory: {py_path}")

    # Use an explicit SourceFileLoader so any extension works (.pylocal, .txt, etc.)
    loader = SourceFileLoader(alias, py_path)
    spec = importlib.util.spec_from_loader(alias, loader)
    if spec is None or spec.loader is None:
        raise ImportError(f"Could not create import spec for {py_path}")

    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)
    return mod


def load_settings(path=None):
    """Override file if given, else (re)import layout_settings."""
    if path:
        return _load_module_from_file(path)
    if "layout_settings" in sys.modules:
        return importlib.reload(sys.modules["layout_settings"])
    return importlib.import_module("layout_settings")


def load_records(path=DATA_LONG_PATH):
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(
            f"{path} not found. Generate it first with prepare_market_dataset.py."
        )
    df = pd.read_csv(path)
    need = RECORD_COLUMNS | SEGMENT_COLUMNS
    missing = need - set(df.columns)
    if missing:
        raise ValueError(f"Missing columns in CSV: {sorted(missing)}")

    df["year"] = pd.to_numeric(df["year"], errors="coerce").astype("Int64")
    df["market_value_usd"] = pd.to_numeric(df["market_value_usd"], errors="coerce")
    df["volume_units"] = pd.to_numeric(df["volume_units"], errors="coerce")
    return df


def reload_settings_state(state, path=None):
    """
    Reload settings into state["settings"] / state["params"]. Both are left
    as they were when the new settings fail to load or validate.
    """
    try:
        settings = load_settings(path)
        params = LayoutParams.from_module(settings)
    except Exception as e:
        logger.warning("settings reload failed: %s", e)
        return False, f"Reload failed: {e}"
    state["settings"], state["params"] = settings, params
    logger.info("settings reloaded (%s)", path or "layout_settings")
    return True, "Reloaded settings ✅"


def render_attractiveness(df, regions, countries, segment, settings, params=None, segment_values=None):
    """Figure for the attractiveness tab: placeholder, or laid-out bubbles."""
    if not segment:
        return empty_figure("Select a segment type above to view the market attractiveness chart")

    seg = parse_segment(segment)
    d = filter_records(df, regions=regions, countries=countries, segment_values=segment_values)
    items = build_bubble_items(
        d, seg,
        start_year=getattr(settings, "START_YEAR", 2025),
        end_year=getattr(settings, "END_YEAR", 2032),
    )
    if not items:
        return empty_figure("No data available for the selected filters")

    result = layout(items, params or LayoutParams.from_module(settings))
    return make_bubble_figure(
        result,
        x_label=getattr(settings, "X_AXIS_LABEL", "CAGR Index"),
        y_label=getattr(settings, "Y_AXIS_LABEL", "Market Share Index"),
        title=seg.label,
        footnote=getattr(settings, "SIZE_FOOTNOTE", None),
        palette_name=getattr(settings, "PALETTE", "Plotly"),
        weight_label="Incremental Opportunity (US$ Mn)",
    )


def _options(values):
    return [{"label": v, "value": v} for v in values]


def filter_id(seg):
    return f"filter-{seg.key}"


# -----------------------------
# App layout
# -----------------------------
def create_app(df, settings):
    state = {"settings": settings, "params": LayoutParams.from_module(settings)}
    title = getattr(settings, "APP_TITLE", "Market Attractiveness")
    regions = sorted(df["region"].dropna().unique().tolist())

    app = Dash(__name__, title=title)
    app.layout = html.Div(
        style={"fontFamily": "system-ui, -apple-system, Segoe UI, Roboto, Helvetica, Arial",
               "padding": "16px", "maxWidth": "1200px", "margin": "0 auto"},
        children=[
            html.H2(title, style={"marginBottom": "8px"}),
            html.P("Filter by region, country and segment values, then pick a segment type. "
                   "Bubble size shows incremental opportunity; the largest one is pulled out to the upper right."),
            html.Div(
                style={"display": "flex", "gap": "10px", "alignItems": "center",
                       "margin": "6px 0 12px"},
                children=[
                    html.Button("🔁 Reload settings", id="btn-reload", n_clicks=0),
                    html.Div(id="reload-status", style={"color": "#555"}),
                ]
            ),

            # Controls
            html.Div(
                style={"display": "grid", "gridTemplateColumns": "1fr 1fr 1fr", "gap": "12px",
                       "alignItems": "center", "margin": "12px 0 20px 0"},
                children=[
                    html.Div([
                        html.Label("Region"),
                        dcc.Dropdown(id="region", options=_options(regions), value=[], multi=True),
                    ]),
                    html.Div([
                        html.Label("Country"),
                        dcc.Dropdown(id="country", options=_options(country_options(df)), value=[], multi=True),
                    ]),
                    html.Div([
                        html.Label("Segment Type"),
                        dcc.Dropdown(
                            id="segment",
                            options=segment_options(),
                            value=getattr(settings, "DEFAULT_SEGMENT", None),
                            clearable=True,
                        ),
                    ]),
                ] + [
                    html.Div([
                        html.Label(seg.label.replace("By ", "", 1)),
                        dcc.Dropdown(
                            id=filter_id(seg),
                            options=_options(segment_value_options(df, seg)),
                            value=[],
                            multi=True,
                        ),
                    ])
                    for seg in SegmentType
                ],
            ),

            dcc.Graph(
                id="bubble_chart",
                config={"displaylogo": False, "modeBarButtonsToRemove": ["lasso2d", "select2d"]},
                style={"height": "75vh"},
            ),
            dcc.Store(id="settings-ping"),
        ],
    )

    # -----------------------------
    # Callbacks
    # -----------------------------
    @app.callback(
        Output("settings-ping", "data"),
        Output("reload-status", "children"),
        Input("btn-reload", "n_clicks"),
        prevent_initial_call=True,
    )
    def reload_settings(n_clicks):
        """Hot-reload the settings module and re-render."""
        ok, status = reload_settings_state(state, SETTINGS_FILE)
        return ({"reloads": n_clicks} if ok else None), status

    @app.callback(
        Output("country", "options"),
        Output("country", "value"),
        Input("region", "value"),
        State("country", "value"),
    )
    def sync_countries(selected_regions, selected_countries):
        available = country_options(df, selected_regions)
        kept = [c for c in (selected_countries or []) if c in available]
        return _options(available), kept

    @app.callback(
        Output("bubble_chart", "figure"),
        Input("region", "value"),
        Input("country", "value"),
        Input("segment", "value"),
        Input("settings-ping", "data"),
        *[Input(filter_id(seg), "value") for seg in SegmentType],
    )
    def update_chart(selected_regions, selected_countries, segment, _ping, *selected_values):
        segment_values = dict(zip(SegmentType, selected_values))
        try:
            return render_attractiveness(df, selected_regions, selected_countries, segment,
                                         state["settings"], state["params"], segment_values)
        except UnknownSegmentError:
            raise exceptions.PreventUpdate

    return app


# -----------------------------
# Run
# -----------------------------
if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    records = load_records(DATA_LONG_PATH)
    active = load_settings(SETTINGS_FILE)
    print(f"Rows: {len(records):,}, regions: {records['region'].nunique()}, "
          f"countries: {records['country'].nunique()}, "
          f"years {int(records['year'].min())}–{int(records['year'].max())}")
    create_app(records, active).run(debug=True, dev_tools_hot_reload=False)
