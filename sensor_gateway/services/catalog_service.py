# catalog_service.py

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Union

from sensor_gateway.core.exceptions import ConfigurationError
from sensor_gateway.models.sensor_models import SensorDefinition


logger = logging.getLogger(__name__)

DEFAULT_SENSORS: List[Dict[str, Any]] = [
    {"id": 1001, "name": "Room 101 Temp",   "type": "AI", "units": "degreesCelsius"},
    {"id": 1002, "name": "Room 102 CO2",    "type": "AI", "units": "partsPerMillion"},
    {"id": 1003, "name": "Room 103 Motion", "type": "BI"},
]


class SensorCatalog:
    """
    Configured list of sensor definitions.

    Rows are parsed on every ``list()`` call, so callers get equal but not
    identical definitions across calls. Invalid rows are reported once and
    skipped; the remaining rows are still served.
    """

    def __init__(self, rows: Optional[List[Dict[str, Any]]] = None):
        self._rows = [dict(r) for r in (DEFAULT_SENSORS if rows is None else rows)]
        self._reported: Set[int] = set()

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "SensorCatalog":
        """Load rows from a JSON file holding a list of ``{"id", "name", "type", "units"?}`` objects."""
        path = Path(path)
        try:
            rows = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read sensor catalog {path}: {e}") from e
        if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
            raise ConfigurationError(f"Sensor catalog {path} must be a JSON list of objects")
        logger.info(f"Loaded {len(rows)} sensor rows from {path}")
        return cls(rows)

    def list(self) -> List[SensorDefinition]:
        definitions: List[SensorDefinition] = []
        seen: Set[int] = set()
        for index, row in enumerate(self._rows):
            try:
                definition = SensorDefinition.from_row(row)
            except ConfigurationError as e:
                self._report(index, f"Skipping catalog row {index}: {e}")
                continue
            if definition.id in seen:
                self._report(index, f"Skipping catalog row {index}: duplicate sensor id {definition.id}",
                             logging.WARNING)
                continue
            seen.add(definition.id)
            definitions.append(definition)
        return definitions

    def _report(self, index: int, message: str, level: int = logging.ERROR):
        if index not in self._reported:
            self._reported.add(index)
            logger.log(level, message)
