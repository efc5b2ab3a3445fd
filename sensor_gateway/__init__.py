"""BACnet Sensor Gateway - Main Package"""

__version__ = '1.0.0'
__description__ = 'Expose sensor readings as BACnet objects with periodic value synchronization'

# Core patterns - most fundamental
from .core import StateMachine, SchedulerState, GatewayError

# Models - domain objects
from .models import SensorKind, SensorDefinition, ObjectId

# Services
from .services import SensorCatalog, ObjectRegistry

# Scheduling
from .scheduling import SyncScheduler, TickReport

# Orchestration
from .orchestration import GatewayLifecycle

# Factories
from .protocols import ProtocolFactory
from .providers import ValueProviderFactory

__all__ = [
    # Core
    'StateMachine',
    'SchedulerState',
    'GatewayError',

    # Models
    'SensorKind',
    'SensorDefinition',
    'ObjectId',

    # Services
    'SensorCatalog',
    'ObjectRegistry',
    'SyncScheduler',
    'TickReport',
    'GatewayLifecycle',

    # Factories
    'ProtocolFactory',
    'ValueProviderFactory'
]
