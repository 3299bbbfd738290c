"""Common utility functions."""

from .geo import bounding_box, fixed_box, haversine_km, within_radius
from .params import int_param

__all__ = [
    "bounding_box",
    "fixed_box",
    "haversine_km",
    "within_radius",
    "int_param",
]
