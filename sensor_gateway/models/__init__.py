"""Data models and domain objects."""

from .sensor_models import (
    SensorKind,
    SensorDefinition,
    ObjectId,
    Reading
)

__all__ = [
    'SensorKind',
    'SensorDefinition',
    'ObjectId',
    'Reading'
]
