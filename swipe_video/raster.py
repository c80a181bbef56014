"""Stateless rasterization primitives that draw onto a :class:`Canvas`.

Every function clips to the canvas: pixels that would land outside
``[0, width) x [0, height)`` are dropped rather than wrapped or raised on.
"""

from __future__ import annotations

import math
from typing import Iterator, List, Sequence, Tuple

from swipe_video.canvas import Canvas, Color
from swipe_video.errors import InvalidPolygonError
from swipe_video.models import Rect

PointF = Tuple[float, float]
PointI = Tuple[int, int]


def _round_half_away(value: float) -> int:
    if value < 0:
        return -math.floor(-value + 0.5)
    return math.floor(value + 0.5)


# ----------------------------------------------------------------------
# Lines
# ----------------------------------------------------------------------


def bresenham_line(start: PointF, end: PointF) -> Iterator[PointI]:
    """Yield the integer grid points of the segment from ``start`` to ``end``.

    The axis with the larger delta drives the iteration; endpoints are swapped
    so it always increases, and the other axis steps whenever the accumulated
    error crosses half the driving delta.
    """
    x0, y0 = float(start[0]), float(start[1])
    x1, y1 = float(end[0]), float(end[1])

    is_steep = abs(y1 - y0) > abs(x1 - x0)
    if is_steep:
        x0, y0 = y0, x0
        x1, y1 = y1, x1
    if x0 > x1:
        x0, x1 = x1, x0
        y0, y1 = y1, y0

    dx = x1 - x0
    dy = abs(y1 - y0)
    error = dx / 2.0
    y_step = 1 if y0 < y1 else -1

    x = int(x0)
    y = int(y0)
    end_x = int(x1)
    while x <= end_x:
        yield (y, x) if is_steep else (x, y)
        x += 1
        error -= dy
        if error < 0:
            y += y_step
            error += dx


def draw_line(canvas: Canvas, start: PointF, end: PointF, color: Color) -> None:
    for x, y in bresenham_line(start, end):
        canvas.draw_pixel(x, y, color)


# ----------------------------------------------------------------------
# Circles and ellipses
# ----------------------------------------------------------------------


def _circle_offsets(radius: int) -> Iterator[PointI]:
    """Midpoint circle: one octant of offsets, ``x`` rising from 0 until it meets ``y``."""
    x = 0
    y = radius
    p = 1 - radius
    while x <= y:
        yield x, y
        x += 1
        if p < 0:
            p += 2 * x + 1
        else:
            y -= 1
            p += 2 * (x - y) + 1


def draw_filled_circle(canvas: Canvas, center: PointI, radius: int, color: Color) -> None:
    cx, cy = int(center[0]), int(center[1])
    for x, y in _circle_offsets(int(radius)):
        canvas.fill_span(cy + y, cx - x, cx + x, color)
        canvas.fill_span(cy + x, cx - y, cx + y, color)
        canvas.fill_span(cy - y, cx - x, cx + x, color)
        canvas.fill_span(cy - x, cx - y, cx + y, color)


def draw_hollow_circle(canvas: Canvas, center: PointI, radius: int, color: Color) -> None:
    cx, cy = int(center[0]), int(center[1])
    for x, y in _circle_offsets(int(radius)):
        canvas.draw_pixel(cx + x, cy + y, color)
        canvas.draw_pixel(cx + y, cy + x, color)
        canvas.draw_pixel(cx - y, cy + x, color)
        canvas.draw_pixel(cx - x, cy + y, color)
        canvas.draw_pixel(cx - x, cy - y, color)
        canvas.draw_pixel(cx - y, cy - x, color)
        canvas.draw_pixel(cx + y, cy - x, color)
        canvas.draw_pixel(cx + x, cy - y, color)


def _ellipse_offsets(width_radius: int, height_radius: int) -> Iterator[PointI]:
    """Midpoint ellipse: quadrant offsets, flat region first, then the steep region."""
    w2 = float(width_radius * width_radius)
    h2 = float(height_radius * height_radius)
    x = 0
    y = height_radius
    px = 0.0
    py = 2.0 * w2 * y

    yield x, y

    # Top and bottom regions.
    p = h2 - (w2 * height_radius) + (0.25 * w2)
    while px < py:
        x += 1
        px += 2.0 * h2
        if p < 0.0:
            p += h2 + px
        else:
            y -= 1
            py -= 2.0 * w2
            p += h2 + px - py
        yield x, y

    # Left and right regions.
    p = h2 * (x + 0.5) ** 2 + w2 * (y - 1) ** 2 - w2 * h2
    while y > 0:
        y -= 1
        py -= 2.0 * w2
        if p > 0.0:
            p += w2 - py
        else:
            x += 1
            px += 2.0 * h2
            p += w2 - py + px
        yield x, y


def draw_filled_ellipse(
    canvas: Canvas,
    center: PointI,
    width_radius: int,
    height_radius: int,
    color: Color,
) -> None:
    if width_radius == height_radius:
        draw_filled_circle(canvas, center, width_radius, color)
        return

    cx, cy = int(center[0]), int(center[1])
    for x, y in _ellipse_offsets(int(width_radius), int(height_radius)):
        canvas.fill_span(cy + y, cx - x, cx + x, color)
        canvas.fill_span(cy - y, cx - x, cx + x, color)


def draw_hollow_ellipse(
    canvas: Canvas,
    center: PointI,
    width_radius: int,
    height_radius: int,
    color: Color,
) -> None:
    if width_radius == height_radius:
        draw_hollow_circle(canvas, center, width_radius, color)
        return

    cx, cy = int(center[0]), int(center[1])
    for x, y in _ellipse_offsets(int(width_radius), int(height_radius)):
        canvas.draw_pixel(cx + x, cy + y, color)
        canvas.draw_pixel(cx - x, cy + y, color)
        canvas.draw_pixel(cx + x, cy - y, color)
        canvas.draw_pixel(cx - x, cy - y, color)


# ----------------------------------------------------------------------
# Rectangles
# ----------------------------------------------------------------------


def draw_filled_rect(canvas: Canvas, rect: Rect, color: Color) -> None:
    """Fill ``rect`` after intersecting it with the canvas bounds."""
    canvas.fill_rect(rect, color)


def draw_hollow_rect(canvas: Canvas, rect: Rect, color: Color) -> None:
    if rect.is_empty:
        return
    left, top = float(rect.left), float(rect.top)
    right, bottom = float(rect.right - 1), float(rect.bottom - 1)
    draw_line(canvas, (left, top), (right, top), color)
    draw_line(canvas, (left, bottom), (right, bottom), color)
    draw_line(canvas, (left, top), (left, bottom), color)
    draw_line(canvas, (right, top), (right, bottom), color)


def clamp_corner_radius(rect: Rect, radius: int) -> int:
    return max(0, min(int(radius), (min(rect.width, rect.height) - 1) // 2))


def draw_filled_rounded_rect(canvas: Canvas, rect: Rect, radius: int, color: Color) -> None:
    """Fill ``rect`` with corners rounded by ``radius``.

    Four filled corner circles plus one rect spanning the full width between the
    top/bottom caps and one spanning the full height between the side caps.
    ``radius`` is clamped so every corner circle stays inside ``rect``.
    """
    if rect.is_empty:
        return
    radius = clamp_corner_radius(rect, radius)
    left, top = rect.left, rect.top
    inner_right, inner_bottom = rect.right - 1, rect.bottom - 1

    draw_filled_circle(canvas, (left + radius, top + radius), radius, color)
    draw_filled_circle(canvas, (left + radius, inner_bottom - radius), radius, color)
    draw_filled_circle(canvas, (inner_right - radius, top + radius), radius, color)
    draw_filled_circle(canvas, (inner_right - radius, inner_bottom - radius), radius, color)

    draw_filled_rect(canvas, Rect(left, top + radius, rect.width, rect.height - 2 * radius), color)
    draw_filled_rect(canvas, Rect(left + radius, top, rect.width - 2 * radius, rect.height), color)


def draw_hollow_rounded_rect(canvas: Canvas, rect: Rect, radius: int, color: Color) -> None:
    """Outline counterpart of :func:`draw_filled_rounded_rect`."""
    if rect.is_empty:
        return
    radius = clamp_corner_radius(rect, radius)
    left, top = rect.left, rect.top
    inner_right, inner_bottom = rect.right - 1, rect.bottom - 1

    draw_line(canvas, (left + radius, top), (inner_right - radius, top), color)
    draw_line(canvas, (left + radius, inner_bottom), (inner_right - radius, inner_bottom), color)
    draw_line(canvas, (left, top + radius), (left, inner_bottom - radius), color)
    draw_line(canvas, (inner_right, top + radius), (inner_right, inner_bottom - radius), color)

    corners = (
        (left + radius, top + radius, -1, -1),
        (inner_right - radius, top + radius, 1, -1),
        (left + radius, inner_bottom - radius, -1, 1),
        (inner_right - radius, inner_bottom - radius, 1, 1),
    )
    for x, y in _circle_offsets(radius):
        for cx, cy, sx, sy in corners:
            canvas.draw_pixel(cx + sx * x, cy + sy * y, color)
            canvas.draw_pixel(cx + sx * y, cy + sy * x, color)


# ----------------------------------------------------------------------
# Polygons
# ----------------------------------------------------------------------


def _validate_ring(vertices: Sequence[Tuple[float, float]], minimum: int) -> None:
    if not vertices:
        raise InvalidPolygonError("Polygon has no vertices")
    if len(vertices) < minimum:
        raise InvalidPolygonError(
            f"Polygon only has {len(vertices)} points, but at least {minimum} are needed"
        )
    if tuple(vertices[0]) == tuple(vertices[-1]):
        raise InvalidPolygonError(
            f"First point {tuple(vertices[0])} == last point {tuple(vertices[-1])}; "
            "the ring is closed implicitly"
        )


def _scanline_intersections(edges: Sequence[Tuple[PointI, PointI]], y: int) -> List[int]:
    intersections: List[int] = []
    for (x0, y0), (x1, y1) in edges:
        if not (y0 <= y <= y1 or y1 <= y <= y0):
            continue
        if y0 == y1:
            # Horizontal edges contribute both endpoints.
            intersections.append(x0)
            intersections.append(x1)
        elif y0 == y or y1 == y:
            if y1 > y:
                intersections.append(x0)
            if y0 > y:
                intersections.append(x1)
        else:
            fraction = (y - y0) / (y1 - y0)
            intersections.append(_round_half_away(x0 + fraction * (x1 - x0)))
    intersections.sort()
    return intersections


def draw_filled_polygon(canvas: Canvas, vertices: Sequence[PointI], color: Color) -> None:
    """Scan-line fill of the implicitly closed ring ``vertices`` (even-odd rule).

    Raises :class:`InvalidPolygonError` when ``vertices`` is empty or repeats its
    first vertex at the end.
    """
    _validate_ring(vertices, 1)
    points = [(int(x), int(y)) for x, y in vertices]
    edges = list(zip(points, points[1:] + points[:1]))

    last_row = canvas.height - 1
    y_min = max(0, min(min(y for _, y in points), last_row))
    y_max = max(0, min(max(y for _, y in points), last_row))

    for y in range(y_min, y_max + 1):
        intersections = _scanline_intersections(edges, y)
        for x_from, x_to in zip(intersections[0::2], intersections[1::2]):
            canvas.fill_span(y, x_from, x_to, color)


def draw_hollow_polygon(canvas: Canvas, vertices: Sequence[PointF], color: Color) -> None:
    """Stroke every edge of the implicitly closed ring ``vertices``."""
    _validate_ring(vertices, 2)
    for start, end in zip(vertices, vertices[1:]):
        draw_line(canvas, start, end, color)
    draw_line(canvas, vertices[-1], vertices[0], color)


def draw_polygon(canvas: Canvas, vertices: Sequence[PointI], color: Color) -> None:
    """Filled polygon whose outline is also stroked, so edge pixels are always covered."""
    draw_filled_polygon(canvas, vertices, color)
    points = [(float(x), float(y)) for x, y in vertices]
    for start, end in zip(points, points[1:] + points[:1]):
        draw_line(canvas, start, end, color)


# ----------------------------------------------------------------------
# Curves and markers
# ----------------------------------------------------------------------


def draw_cubic_bezier_curve(
    canvas: Canvas,
    start: PointF,
    end: PointF,
    control_a: PointF,
    control_b: PointF,
    color: Color,
) -> None:
    """Approximate the curve with line segments sampled along ``t``."""

    def curve(t: float) -> PointF:
        mt = 1.0 - t
        x = (
            start[0] * mt**3
            + 3.0 * control_a[0] * mt**2 * t
            + 3.0 * control_b[0] * mt * t**2
            + end[0] * t**3
        )
        y = (
            start[1] * mt**3
            + 3.0 * control_a[1] * mt**2 * t
            + 3.0 * control_b[1] * mt * t**2
            + end[1] * t**3
        )
        return float(_round_half_away(x)), float(_round_half_away(y))

    curve_length_bound = (
        math.dist(start, control_a) + math.dist(control_a, control_b) + math.dist(control_b, end)
    )
    # Shorter curves get proportionally more segments.
    segments = int(math.sqrt(curve_length_bound**2 + 800.0) / 8.0)
    if segments <= 0:
        return

    interval = 1.0 / segments
    t_previous = 0.0
    for index in range(segments):
        t_next = (index + 1) * interval
        draw_line(canvas, curve(t_previous), curve(t_next), color)
        t_previous = t_next


_CROSS_STENCIL = (
    (0, 1, 0),
    (1, 1, 1),
    (0, 1, 0),
)


def draw_cross(canvas: Canvas, color: Color, x: int, y: int) -> None:
    for sy, row in enumerate(_CROSS_STENCIL, start=-1):
        for sx, enabled in enumerate(row, start=-1):
            if enabled:
                canvas.draw_pixel(x + sx, y + sy, color)


__all__ = [
    "bresenham_line",
    "clamp_corner_radius",
    "draw_cross",
    "draw_cubic_bezier_curve",
    "draw_filled_circle",
    "draw_filled_ellipse",
    "draw_filled_polygon",
    "draw_filled_rect",
    "draw_filled_rounded_rect",
    "draw_hollow_circle",
    "draw_hollow_ellipse",
    "draw_hollow_polygon",
    "draw_hollow_rect",
    "draw_hollow_rounded_rect",
    "draw_line",
    "draw_polygon",
]
