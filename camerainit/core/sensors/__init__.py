"""Sensor datasheets and lookup."""

from .database import Datasheet, SensorDatabase

__all__ = [
    "Datasheet",
    "SensorDatabase",
]
