"""Catalog and registry services."""

from .catalog_service import SensorCatalog, DEFAULT_SENSORS
from .object_registry import ObjectRegistry

__all__ = [
    'SensorCatalog',
    'DEFAULT_SENSORS',
    'ObjectRegistry'
]
