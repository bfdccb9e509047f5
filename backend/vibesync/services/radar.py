"""Radar chart geometry for a preference vector."""

import math
from typing import List, Tuple

from vibesync.schemas.playlist import (
    PlaylistPreferences,
    RadarAxis,
    RadarChart,
    RadarPoint,
)

GRID_LEVELS = (0.25, 0.5, 0.75, 1.0)
LABEL_OFFSET = 15


def radar_axes(prefs: PlaylistPreferences) -> List[Tuple[str, int]]:
    return [
        ("Mood", prefs.mood),
        ("Energy", prefs.energy),
        ("Popularity", prefs.popularity),
        ("Dance", prefs.danceability),
        ("Acoustic", prefs.acousticness),
        ("Instrum", prefs.instrumentalness),
    ]


def _point(center: float, distance: float, angle: float) -> RadarPoint:
    return RadarPoint(
        x=round(center + distance * math.cos(angle), 4),
        y=round(center + distance * math.sin(angle), 4),
    )


def compute_radar_chart(prefs: PlaylistPreferences, size: int = 200) -> RadarChart:
    """Lay out the six preference axes clockwise from the top."""
    center = size / 2
    radius = size * 0.4
    axes = radar_axes(prefs)
    angles = [(i * 2 * math.pi) / len(axes) - math.pi / 2 for i in range(len(axes))]

    return RadarChart(
        size=size,
        center=RadarPoint(x=center, y=center),
        radius=radius,
        axes=[
            RadarAxis(
                label=label,
                value=value,
                end=_point(center, radius, angle),
                label_anchor=_point(center, radius + LABEL_OFFSET, angle),
            )
            for (label, value), angle in zip(axes, angles)
        ],
        shape=[
            _point(center, (value / 100) * radius, angle)
            for (_, value), angle in zip(axes, angles)
        ],
        grid=[
            [_point(center, level * radius, angle) for angle in angles]
            for level in GRID_LEVELS
        ],
    )
