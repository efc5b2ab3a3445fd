from typing import Dict, Type

from sensor_gateway.core.exceptions import ConfigurationError
from sensor_gateway.protocols.base_stack import ProtocolStack, StackType
from sensor_gateway.protocols.bacnet_stack import BACnetIPStack
from sensor_gateway.protocols.loopback_stack import LoopbackStack


class ProtocolFactory:

    _registry: Dict[StackType, Type[ProtocolStack]] = {
        StackType.BACNET_IP : BACnetIPStack,
        StackType.LOOPBACK : LoopbackStack,
    }

    @classmethod
    def register_stack(cls, stack_type: StackType, stack_class: Type[ProtocolStack]):
        cls._registry[stack_type] = stack_class

    @classmethod
    def create(cls, stack_type, **kwargs) -> ProtocolStack:
        """
        Create a protocol stack.

        Args:
            stack_type (str | StackType): 'bacnet_ip' or 'loopback'
            kwargs: Passed to the stack constructor

        Returns:
            ProtocolStack: Stack instance ready for bring_up_device()
        """
        try:
            stack_type = StackType(str(getattr(stack_type, "value", stack_type)).strip().lower())
        except ValueError:
            raise ConfigurationError(f"Unknown protocol stack: {stack_type!r}") from None

        handler = cls._registry.get(stack_type)
        if not handler:
            raise ConfigurationError(f"No handler registered for stack: {stack_type}")
        return handler(**kwargs)
