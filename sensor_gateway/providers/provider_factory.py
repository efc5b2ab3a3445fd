from typing import Any, Dict, List, Optional, Type

from sensor_gateway.core.exceptions import ConfigurationError
from .base_provider import ValueProvider
from .mock_provider import MockValueProvider
from .fixed_provider import FixedValueProvider

class ValueProviderFactory:
    """Factory for creating value provider instances"""

    _provider_registry: Dict[str, Type[ValueProvider]] = {
        "mock": MockValueProvider,
        "fixed": FixedValueProvider,
    }

    @classmethod
    def register_provider(cls, provider_type: str, provider_class: Type[ValueProvider]):
        """Register new value provider type"""
        cls._provider_registry[provider_type.strip().lower()] = provider_class

    @classmethod
    def create(cls, provider_type: str, provider_config: Optional[Dict[str, Any]] = None) -> ValueProvider:
        """Create a value provider by registered name"""
        provider_class = cls._provider_registry.get(provider_type.strip().lower())
        if provider_class is None:
            raise ConfigurationError(
                f"Unknown value provider {provider_type!r}; available: {', '.join(cls.get_available_providers())}"
            )
        try:
            return provider_class(provider_config)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid {provider_type} provider config: {e}") from e

    @classmethod
    def get_available_providers(cls) -> List[str]:
        """Get list of available provider types"""
        return list(cls._provider_registry.keys())
