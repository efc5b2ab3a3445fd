import random
from typing import Any, Dict, Optional, Tuple, Union

from sensor_gateway.models.sensor_models import Reading, SensorKind
from .base_provider import ValueProvider

# sensor id -> (low, high) for analog points, or "binary"
DEFAULT_RANGES: Dict[int, Union[Tuple[float, float], str]] = {
    1001: (20.0, 25.0),     # Room 101 Temp, degrees C
    1002: (400.0, 800.0),   # Room 102 CO2, ppm
    1003: "binary",         # Room 103 Motion
}

class MockValueProvider(ValueProvider):
    """Random readings standing in for a real sensor backend.

    Analog values are drawn as ``low + random() * (high - low)`` and therefore
    lie in ``[low, high)``.
    """

    def __init__(self, provider_config: Optional[Dict[str, Any]] = None):
        super().__init__(provider_config)
        ranges = self.config.get("ranges")
        self.ranges = {int(k): _parse_range(v) for k, v in ranges.items()} if ranges else dict(DEFAULT_RANGES)
        self._rng = random.Random(self.config.get("seed"))

    async def read(self, sensor_id: int, kind: Optional[SensorKind] = None) -> Reading:
        point = self.ranges.get(sensor_id)
        if point is None:
            return self.default_reading(kind)
        if point == "binary":
            return self._rng.random() < 0.5
        low, high = point
        return low + self._rng.random() * (high - low)


def _parse_range(value) -> Union[Tuple[float, float], str]:
    if isinstance(value, str) and value.strip().lower() in ("binary", "bi"):
        return "binary"
    low, high = (float(v) for v in value)
    if high <= low:
        raise ValueError(f"Empty range [{low}, {high})")
    return low, high
