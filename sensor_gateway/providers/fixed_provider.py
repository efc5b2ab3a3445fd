from typing import Any, Dict, Optional

from sensor_gateway.models.sensor_models import Reading, SensorKind
from .base_provider import ValueProvider

class FixedValueProvider(ValueProvider):
    """Constant readings per sensor id, for commissioning and dry runs"""

    def __init__(self, provider_config: Optional[Dict[str, Any]] = None):
        super().__init__(provider_config)
        self.values: Dict[int, Reading] = {
            int(k): v for k, v in (self.config.get("values") or {}).items()
        }

    async def read(self, sensor_id: int, kind: Optional[SensorKind] = None) -> Reading:
        if sensor_id not in self.values:
            return self.default_reading(kind)
        return self.values[sensor_id]
