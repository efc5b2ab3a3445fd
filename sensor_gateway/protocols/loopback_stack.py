"""
Loopback protocol stack: an in-memory device table with no network I/O.

Devices survive ``terminate`` so a second bring-up with the same device id
sees the objects of the first run, like a stack with a persistent object table.
"""

from typing import Any, Dict, List, Optional

from sensor_gateway.models.sensor_models import ObjectId, Reading, SensorKind
from sensor_gateway.protocols.base_stack import (
    DeviceHandle,
    PropertyId,
    ProtocolObjectHandle,
    ProtocolStack,
    TransportConfig,
)

_KINDS_BY_TYPE = {kind.object_type: kind for kind in SensorKind}


class LoopbackObject(ProtocolObjectHandle):
    """Protocol object whose properties live in a dict."""

    def __init__(self, object_id: ObjectId, kind: SensorKind, name: str,
                 initial_value: Reading, units: Optional[str] = None):
        super().__init__(object_id, kind)
        self.properties: Dict[str, Any] = {
            "objectName": name,
            PropertyId.PRESENT_VALUE.value: initial_value,
            PropertyId.OUT_OF_SERVICE.value: False,
            "units": units,
        }
        self.write_count = 0

    @property
    def name(self) -> str:
        return self.properties["objectName"]

    @property
    def current_value(self) -> Reading:
        return self.properties[PropertyId.PRESENT_VALUE.value]

    @property
    def out_of_service(self) -> bool:
        return self.properties[PropertyId.OUT_OF_SERVICE.value]

    def _store(self, property_id: PropertyId, value: Any):
        self.properties[property_id.value] = value
        self.write_count += 1


class LoopbackDevice(DeviceHandle):
    def __init__(self, device_id: int, device_name: str):
        super().__init__(device_id, device_name)
        self.objects: Dict[ObjectId, ProtocolObjectHandle] = {}
        self.announcements = 0
        self.online = False

    def get_object(self, object_id: ObjectId) -> Optional[ProtocolObjectHandle]:
        return self.objects.get(object_id)

    def create_object(self, object_id: ObjectId, name: str,
                      initial_value: Reading, units: Optional[str] = None) -> ProtocolObjectHandle:
        kind = _KINDS_BY_TYPE.get(object_id.object_type)
        if kind is None:
            raise ValueError(f"Unsupported object type: {object_id.object_type}")
        return LoopbackObject(object_id, kind, name, initial_value, units)

    def add_object(self, handle: ProtocolObjectHandle) -> bool:
        if handle.object_id in self.objects:
            self.logger.error(f"Already an object with identifier {handle.object_id}")
            return False
        if any(obj.name == handle.name for obj in self.objects.values()):
            self.logger.error(f"Already an object with name {handle.name!r}")
            return False
        self.objects[handle.object_id] = handle
        return True

    def broadcast_discovery_announcement(self):
        self.announcements += 1
        self.logger.info(f"I-Am device,{self.device_id} ({len(self.objects)} objects)")


class LoopbackStack(ProtocolStack):
    """In-memory stack; ``fail_bring_up`` makes the first N bring-up attempts fail."""

    def __init__(self, fail_bring_up: int = 0):
        super().__init__()
        self.devices: Dict[int, LoopbackDevice] = {}
        self.terminated: List[int] = []
        self._fail_bring_up = fail_bring_up

    async def _bring_up(self, device_id: int, device_name: str,
                        transport: TransportConfig) -> DeviceHandle:
        if self._fail_bring_up > 0:
            self._fail_bring_up -= 1
            raise OSError(f"cannot bind {transport.address_spec}")
        device = self.devices.get(device_id)
        if device is None:
            device = LoopbackDevice(device_id, device_name)
            self.devices[device_id] = device
        device.online = True
        return device

    async def _terminate(self, device: DeviceHandle):
        device.online = False
        self.terminated.append(device.device_id)
