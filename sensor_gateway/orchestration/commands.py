from abc import ABC, abstractmethod
from typing import Any, Dict
import logging

from sensor_gateway.core.exceptions import GatewayError
from sensor_gateway.scheduling.sync_scheduler import SyncScheduler
from sensor_gateway.services.object_registry import ObjectRegistry

class LifecycleCommand(ABC):
    """Base class for gateway startup steps"""

    def __init__(self, context: Dict[str, Any]):
        self.context = context
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    async def execute(self) -> Dict[str, Any]:
        """Execute the command and return results"""
        pass

    @abstractmethod
    async def rollback(self) -> None:
        """Undo the command's effects"""
        pass

class DeviceBringUpCommand(LifecycleCommand):
    """Acquire the transport and bring up the local device"""

    async def execute(self) -> Dict[str, Any]:
        stack = self.context["stack"]
        try:
            device = await stack.bring_up_device(
                self.context["device_id"],
                self.context["device_name"],
                self.context["transport"],
            )
        except GatewayError as e:
            self.logger.error(f"Device bring-up failed: {e}")
            return {"success": False, "error": str(e)}

        return {"device": device, "success": True}

    async def rollback(self) -> None:
        device = self.context.pop("device", None)
        if device is not None:
            await self.context["stack"].terminate(device)

class ObjectRegistrationCommand(LifecycleCommand):
    """Create or adopt one protocol object per catalog sensor"""

    async def execute(self) -> Dict[str, Any]:
        registry = ObjectRegistry(self.context["device"])
        definitions = self.context["catalog"].list()
        registered = registry.ensure_all(definitions)

        if registered < len(definitions):
            self.logger.warning(f"{len(definitions) - registered} of {len(definitions)} sensors could not be registered")
        else:
            self.logger.info(f"Registered all {registered} sensors")

        return {"registry": registry, "success": True}

    async def rollback(self) -> None:
        # objects belong to the device and go away with it
        self.context.pop("registry", None)

class SchedulerStartupCommand(LifecycleCommand):
    """Start the periodic value synchronization"""

    async def execute(self) -> Dict[str, Any]:
        scheduler = SyncScheduler(
            self.context["catalog"],
            self.context["registry"],
            self.context["provider"],
            interval_seconds=self.context["interval_seconds"],
            provider_timeout=self.context["provider_timeout"],
        )
        try:
            await scheduler.start()
        except GatewayError as e:
            self.logger.error(f"Scheduler startup failed: {e}")
            return {"success": False, "error": str(e)}

        return {"scheduler": scheduler, "success": True}

    async def rollback(self) -> None:
        scheduler = self.context.get("scheduler")
        if scheduler is not None:
            await scheduler.stop()

class PresenceAnnouncementCommand(LifecycleCommand):
    """Broadcast the device's presence; failure here is not fatal"""

    async def execute(self) -> Dict[str, Any]:
        device = self.context["device"]
        try:
            device.broadcast_discovery_announcement()
            self.logger.info(f"Announced device {device.device_id}")
            announced = True
        except Exception as e:
            self.logger.warning(f"Presence announcement failed: {e}")
            announced = False

        return {"announced": announced, "success": True}

    async def rollback(self) -> None:
        # nothing to withdraw
        pass
