from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, NamedTuple, Optional, Union

from sensor_gateway.core.exceptions import ConfigurationError

# A reading is a float magnitude for analog points and a bool state for binary points.
Reading = Union[float, bool]


###############################################################################
# 1. SENSOR KIND --------------------------------------------------------------
###############################################################################

class SensorKind(Enum):
    """Kind of point a sensor is exposed as."""
    ANALOG = "analog"
    BINARY = "binary"

    @property
    def object_type(self) -> str:
        """BACnet object type name used for this kind."""
        return _OBJECT_TYPES[self]

    @property
    def default_value(self) -> Reading:
        return 0.0 if self is SensorKind.ANALOG else False

    def accepts(self, reading: Any) -> bool:
        """True when *reading* has the Python type this kind stores (no coercion)."""
        if self is SensorKind.BINARY:
            return isinstance(reading, bool)
        return isinstance(reading, (int, float)) and not isinstance(reading, bool)

    @classmethod
    def parse(cls, code: Any) -> "SensorKind":
        key = str(code).strip().lower()
        try:
            return _KIND_CODES[key]
        except KeyError:
            raise ConfigurationError(f"Unsupported sensor type: {code!r}") from None


_OBJECT_TYPES = {
    SensorKind.ANALOG: "analog-input",
    SensorKind.BINARY: "binary-input",
}

_KIND_CODES = {
    "ai": SensorKind.ANALOG,
    "analog": SensorKind.ANALOG,
    "analog-input": SensorKind.ANALOG,
    "bi": SensorKind.BINARY,
    "binary": SensorKind.BINARY,
    "binary-input": SensorKind.BINARY,
}


###############################################################################
# 2. OBJECT IDENTIFIER --------------------------------------------------------
###############################################################################

class ObjectId(NamedTuple):
    """Protocol object identifier: object type name plus instance number."""
    object_type: str
    instance: int

    def __str__(self) -> str:
        return f"{self.object_type},{self.instance}"


###############################################################################
# 3. SENSOR DEFINITION --------------------------------------------------------
###############################################################################

@dataclass(frozen=True, slots=True)
class SensorDefinition:
    """Immutable projection of one catalog row."""
    id: int
    display_name: str
    kind: SensorKind
    units: Optional[str] = None       # BACnet engineering units name, analog only

    @property
    def object_id(self) -> ObjectId:
        return ObjectId(self.kind.object_type, self.id)

    # ---------- factory --------------------------------------------------- #
    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "SensorDefinition":
        missing = [k for k in ("id", "name", "type") if row.get(k) in (None, "")]
        if missing:
            raise ConfigurationError(f"Sensor row {row!r} is missing {', '.join(missing)}")
        sensor_id = _parse_id(row["id"])
        if sensor_id < 0:
            raise ConfigurationError(f"Sensor id must not be negative, got {sensor_id}")
        return cls(
            id           = sensor_id,
            display_name = str(row["name"]),
            kind         = SensorKind.parse(row["type"]),
            units        = row.get("units") or None,
        )


def _parse_id(raw: Any) -> int:
    """Integer sensor id from an int, an integral float or a numeric string."""
    if isinstance(raw, bool):
        raise ConfigurationError(f"Sensor id must be an integer, got {raw!r}")
    if isinstance(raw, float):
        if not raw.is_integer():
            raise ConfigurationError(f"Sensor id must be an integer, got {raw!r}")
        return int(raw)
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Sensor id must be an integer, got {raw!r}") from None
