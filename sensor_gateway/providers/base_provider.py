# sensor_gateway/providers/base_provider.py
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from sensor_gateway.models.sensor_models import Reading, SensorKind

class ValueProvider(ABC):
    """Abstract base class for all sensor value sources"""

    def __init__(self, provider_config: Optional[Dict[str, Any]] = None):
        self.config = provider_config or {}

    @abstractmethod
    async def read(self, sensor_id: int, kind: Optional[SensorKind] = None) -> Reading:
        """Return the current reading for *sensor_id*; unknown ids get default_reading()"""
        pass

    @staticmethod
    def default_reading(kind: Optional[SensorKind] = None) -> Reading:
        """Reading returned for ids the provider does not know: False for binary, else 0.0"""
        return kind.default_value if kind is not None else 0.0

    def get_metadata(self) -> Dict[str, Any]:
        """Return metadata about the provider"""
        return {
            "provider_type": self.__class__.__name__,
            "config": dict(self.config),
        }
