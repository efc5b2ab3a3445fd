"""Value providers and factory."""

from .base_provider import ValueProvider
from .mock_provider import MockValueProvider, DEFAULT_RANGES
from .fixed_provider import FixedValueProvider
from .provider_factory import ValueProviderFactory

__all__ = [
    'ValueProvider',
    'MockValueProvider',
    'DEFAULT_RANGES',
    'FixedValueProvider',
    'ValueProviderFactory'
]
