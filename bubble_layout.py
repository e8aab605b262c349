# bubble_layout.py
# Bubble layout engine: sizes bubbles by weight, pushes the heaviest one into
# open space, relaxes overlaps between the rest and pads the axis domains.

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, fields, replace
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)

AxisDomain = Tuple[float, float]


# -----------------------------
# Tunables
# -----------------------------
@dataclass(frozen=True)
class LayoutParams:
    """
    Tunable constants of the layout. Sizes are chart-space units (marker
    diameters); the offsets marked _PX are screen pixels converted to data
    units with an assumed plot width, so they are approximations for a typical
    container, not physical quantities.
    """

    min_size: float = 11.0
    max_size: float = 35.0
    # used for every bubble when all weights are equal
    neutral_size: float = 20.0

    highlight_min_size: float = 110.0
    highlight_scale: float = 3.15
    highlight_offset_px: float = 100.0
    assumed_plot_width_px: float = 600.0
    # x offset for the highlight when the x range is zero
    default_offset: float = 2.0
    highlight_y_fraction: float = 0.85

    separation_buffer: float = 1.30
    damping: float = 0.6
    max_iterations: int = 15
    epsilon: float = 0.001
    clamp_extension: float = 0.5

    padding_fraction: float = 0.65
    radius_to_unit_factor: float = 40.0
    floor_padding_x: float = 4.0
    floor_padding_y: float = 2.0

    def __post_init__(self):
        if not 0 < self.min_size <= self.max_size:
            raise ValueError(f"Need 0 < min_size <= max_size, got {self.min_size}, {self.max_size}")
        if self.separation_buffer <= 1:
            raise ValueError(f"separation_buffer must be > 1, got {self.separation_buffer}")
        if not 0 < self.damping < 1:
            raise ValueError(f"damping must be in (0, 1), got {self.damping}")
        if self.max_iterations < 0:
            raise ValueError(f"max_iterations must be >= 0, got {self.max_iterations}")
        if self.radius_to_unit_factor <= 0 or self.assumed_plot_width_px <= 0:
            raise ValueError("radius_to_unit_factor and assumed_plot_width_px must be positive")

    @property
    def highlight_size(self):
        return max(self.highlight_min_size, self.max_size * self.highlight_scale)

    @classmethod
    def from_module(cls, module) -> "LayoutParams":
        """Read upper-case constants (MIN_SIZE, DAMPING, ...) from a settings module."""
        values = {}
        for f in fields(cls):
            name = f.name.upper()
            if hasattr(module, name):
                values[f.name] = getattr(module, name)
        if "max_iterations" in values:
            values["max_iterations"] = int(values["max_iterations"])
        return cls(**values)


DEFAULT_PARAMS = LayoutParams()


# -----------------------------
# Data model
# -----------------------------
@dataclass(frozen=True)
class BubbleItem:
    label: str
    x_metric: float
    y_metric: float
    weight: float
    color_index: Optional[int] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class LayoutItem:
    label: str
    x_metric: float
    y_metric: float
    weight: float
    x: float
    y: float
    size: float
    radius: float
    color_index: int
    is_highlight: bool = False
    description: Optional[str] = None


@dataclass(frozen=True)
class LayoutResult:
    items: Tuple[LayoutItem, ...]
    x_domain: AxisDomain
    y_domain: AxisDomain

    @property
    def highlight(self) -> Optional[LayoutItem]:
        return next((it for it in self.items if it.is_highlight), None)


def _span(values):
    arr = np.asarray(values, dtype=float)
    lo, hi = float(arr.min()), float(arr.max())
    return lo, hi, hi - lo


# -----------------------------
# Size normalizer
# -----------------------------
def normalize_sizes(items: Sequence[BubbleItem], params: LayoutParams = DEFAULT_PARAMS) -> List[LayoutItem]:
    """
    Map weights linearly onto [min_size, max_size] and place the highlight
    (first item with the maximum weight) to the right of the largest x and
    near the top of the y range, with an oversized diameter.
    Sizing is relative to the observed weight range, so negative weights
    still give positive sizes.
    """
    if not items:
        return []

    w_min, w_max, w_range = _span([it.weight for it in items])
    x_min, x_max, x_range = _span([it.x_metric for it in items])
    y_min, _, y_range = _span([it.y_metric for it in items])

    highlight_idx = next(i for i, it in enumerate(items) if it.weight == w_max)

    if x_range > 0:
        offset_x = params.highlight_offset_px * x_range / params.assumed_plot_width_px
    else:
        offset_x = params.default_offset

    out = []
    for i, it in enumerate(items):
        if w_range > 0:
            size = params.min_size + (it.weight - w_min) / w_range * (params.max_size - params.min_size)
        else:
            size = params.neutral_size
        x, y = float(it.x_metric), float(it.y_metric)

        is_highlight = i == highlight_idx
        if is_highlight:
            x = x_max + offset_x
            # a zero y range pins the highlight at y_min
            y = y_min + y_range * params.highlight_y_fraction
            size = params.highlight_size

        size = float(size)
        out.append(LayoutItem(
            label=it.label,
            x_metric=float(it.x_metric),
            y_metric=float(it.y_metric),
            weight=float(it.weight),
            x=x,
            y=y,
            size=size,
            radius=size / 2,
            color_index=i if it.color_index is None else int(it.color_index),
            is_highlight=is_highlight,
            description=it.description,
        ))
    return out


# -----------------------------
# Overlap resolver
# -----------------------------
@dataclass(frozen=True)
class _Bounds:
    x_lo: float
    x_hi: float
    y_lo: float
    y_hi: float

    def clamp(self, x, y):
        return min(max(x, self.x_lo), self.x_hi), min(max(y, self.y_lo), self.y_hi)


def _clamp_bounds(items, params):
    """Input metric ranges widened on both sides; a zero-width axis stays open."""
    x_min, x_max, x_range = _span([it.x_metric for it in items])
    y_min, y_max, y_range = _span([it.y_metric for it in items])

    def _axis(lo, hi, rng):
        if rng > 0:
            return lo - rng * params.clamp_extension, hi + rng * params.clamp_extension
        return -math.inf, math.inf

    x_lo, x_hi = _axis(x_min, x_max, x_range)
    y_lo, y_hi = _axis(y_min, y_max, y_range)
    return _Bounds(x_lo, x_hi, y_lo, y_hi)


def _relax_once(snapshot, params, bounds):
    moved = False
    out = []
    for idx, item in enumerate(snapshot):
        if item.is_highlight:
            out.append(item)
            continue

        x, y = item.x, item.y
        for j, other in enumerate(snapshot):
            if j == idx:
                continue
            min_sep = (item.radius + other.radius) * params.separation_buffer
            dx, dy = x - other.x, y - other.y
            dist = math.hypot(dx, dy)
            # coincident centers have no direction to push along
            if params.epsilon < dist < min_sep:
                moved = True
                step = (min_sep - dist) * params.damping
                x += dx / dist * step
                y += dy / dist * step
                x, y = bounds.clamp(x, y)

        out.append(item if (x, y) == (item.x, item.y) else replace(item, x=x, y=y))
    return tuple(out), moved


def relaxation_passes(items, params=DEFAULT_PARAMS) -> Iterator[Tuple[LayoutItem, ...]]:
    """
    Yield the layout after each relaxation pass, stopping after the first
    violation-free pass or after max_iterations passes.

    Every non-highlight item is pushed away from each neighbour that sits
    closer than (r_i + r_j) * separation_buffer, comparing against the
    positions at the start of the pass. Its own displacement accumulates over
    neighbours in index order, so results depend on input order.
    """
    snapshot = tuple(items)
    if not snapshot:
        return
    bounds = _clamp_bounds(snapshot, params)

    for n in range(params.max_iterations):
        snapshot, moved = _relax_once(snapshot, params, bounds)
        yield snapshot
        if not moved:
            logger.debug("relaxation settled after %d pass(es)", n + 1)
            return
    logger.debug("relaxation stopped at iteration budget (%d); residual overlaps accepted",
                 params.max_iterations)


def resolve_overlaps(items, params=DEFAULT_PARAMS):
    final = tuple(items)
    for snapshot in relaxation_passes(items, params):
        final = snapshot
    return list(final)


# -----------------------------
# Axis domains
# -----------------------------
def compute_axis_domains(items, params=DEFAULT_PARAMS):
    """
    Pad the final positions so the largest bubble is not clipped.

    padding = max(floor, range * padding_fraction + max_radius / radius_to_unit_factor)

    The radius term is a pixel-to-data heuristic tuned for a typical
    container; the real mapping is only known once the chart is rendered.
    Empty input gives zero-width (0, 0) domains.
    """
    if not items:
        return (0.0, 0.0), (0.0, 0.0)

    x_min, x_max, x_range = _span([it.x for it in items])
    y_min, y_max, y_range = _span([it.y for it in items])
    radius_units = float(np.max([it.radius for it in items])) / params.radius_to_unit_factor

    pad_x = max(params.floor_padding_x, x_range * params.padding_fraction + radius_units)
    pad_y = max(params.floor_padding_y, y_range * params.padding_fraction + radius_units)
    return (x_min - pad_x, x_max + pad_x), (y_min - pad_y, y_max + pad_y)


# -----------------------------
# Pipeline
# -----------------------------
def layout(items: Sequence[BubbleItem], params: Optional[LayoutParams] = None) -> LayoutResult:
    """Size, place, relax and pad. Pure: a new result for every call."""
    params = params or DEFAULT_PARAMS
    sized = normalize_sizes(items, params)
    relaxed = resolve_overlaps(sized, params)
    x_domain, y_domain = compute_axis_domains(relaxed, params)
    return LayoutResult(items=tuple(relaxed), x_domain=x_domain, y_domain=y_domain)
