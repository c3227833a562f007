"""Unit conversion and display helpers for elevation values."""

from __future__ import annotations

import time

METERS_TO_FEET = 3.28084


def meters_to_feet(meters: float) -> float:
    return meters * METERS_TO_FEET


def feet_to_meters(feet: float) -> float:
    return feet / METERS_TO_FEET


def round_to(value: float, decimals: int) -> float:
    return round(value, decimals)


def format_elevation(value: float, decimals: int = 0) -> str:
    """Format with thousands separators, e.g. ``5,280``."""
    return f"{value:,.{decimals}f}"


def format_accuracy(accuracy: float) -> str:
    if accuracy < 1:
        return "< 1m"
    if accuracy < 10:
        return f"±{accuracy:.1f}m"
    return f"±{round(accuracy)}m"


def format_relative_time(timestamp_ms: int, now_ms: int | None = None) -> str:
    """Describe how long ago *timestamp_ms* was, e.g. ``3 hours ago``."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    seconds = max(0, now_ms - timestamp_ms) // 1000
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24

    if seconds < 60:
        return "just now"
    if minutes < 60:
        return f"{minutes} minute{'s' if minutes > 1 else ''} ago"
    if hours < 24:
        return f"{hours} hour{'s' if hours > 1 else ''} ago"
    return f"{days} day{'s' if days > 1 else ''} ago"
