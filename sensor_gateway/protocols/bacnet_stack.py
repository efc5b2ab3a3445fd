"""
BACnet/IP Protocol Stack Implementation
Serves sensor objects through a bacpypes3 Application
"""

from typing import Any, Optional

from bacpypes3.app import Application
from bacpypes3.argparse import SimpleArgumentParser
from bacpypes3.basetypes import BinaryPV
from bacpypes3.local.analog import AnalogInputObject
from bacpypes3.local.binary import BinaryInputObject
from bacpypes3.object import AnalogInputObject as AnalogInputBase
from bacpypes3.object import BinaryInputObject as BinaryInputBase
from bacpypes3.primitivedata import ObjectIdentifier, Real

from sensor_gateway.models.sensor_models import ObjectId, Reading, SensorKind
from sensor_gateway.protocols.base_stack import (
    DeviceHandle,
    PropertyId,
    ProtocolObjectHandle,
    ProtocolStack,
    TransportConfig,
)

# object type names as bacpypes3 spells them in object identifiers
_BACPYPES_TYPES = {
    "analog-input": "analogInput",
    "binary-input": "binaryInput",
}


def to_object_identifier(object_id: ObjectId) -> ObjectIdentifier:
    try:
        object_type = _BACPYPES_TYPES[object_id.object_type]
    except KeyError:
        raise ValueError(f"Unsupported object type: {object_id.object_type}") from None
    return ObjectIdentifier((object_type, object_id.instance))


def kind_of(obj: Any) -> Optional[SensorKind]:
    """Sensor kind served by a bacpypes3 object, None for other object types."""
    if isinstance(obj, AnalogInputBase):
        return SensorKind.ANALOG
    if isinstance(obj, BinaryInputBase):
        return SensorKind.BINARY
    return None


class BACnetObjectHandle(ProtocolObjectHandle):
    """Handle around a bacpypes3 local object."""

    def __init__(self, object_id: ObjectId, kind: Optional[SensorKind], obj: Any):
        super().__init__(object_id, kind)
        self.obj = obj

    @property
    def name(self) -> str:
        return str(self.obj.objectName)

    @property
    def current_value(self) -> Reading:
        if self.kind is None:
            raise TypeError(f"{self.object_id} is not a sensor input")
        if self.kind is SensorKind.BINARY:
            return self.obj.presentValue == BinaryPV.active
        return float(self.obj.presentValue)

    @property
    def out_of_service(self) -> bool:
        return bool(self.obj.outOfService)

    def _store(self, property_id: PropertyId, value: Any):
        if property_id is PropertyId.OUT_OF_SERVICE:
            self.obj.outOfService = value
        elif self.kind is SensorKind.BINARY:
            self.obj.presentValue = BinaryPV.active if value else BinaryPV.inactive
        else:
            self.obj.presentValue = Real(value)


class BACnetDevice(DeviceHandle):
    def __init__(self, device_id: int, device_name: str, app: Application):
        super().__init__(device_id, device_name)
        self.app = app

    def get_object(self, object_id: ObjectId) -> Optional[ProtocolObjectHandle]:
        obj = self.app.get_object_id(to_object_identifier(object_id))
        if obj is None:
            return None
        kind = kind_of(obj)
        if kind is None:
            self.logger.warning(f"Object {object_id} is a {type(obj).__name__}, not a sensor input")
        return BACnetObjectHandle(object_id, kind, obj)

    def create_object(self, object_id: ObjectId, name: str,
                      initial_value: Reading, units: Optional[str] = None) -> ProtocolObjectHandle:
        # bacpypes3 objects schedule their post-init on the running loop, so call from inside one
        identifier = to_object_identifier(object_id)
        if object_id.object_type == SensorKind.BINARY.object_type:
            obj = BinaryInputObject(
                objectIdentifier=identifier,
                objectName=name,
                presentValue=BinaryPV.active if initial_value else BinaryPV.inactive,
                statusFlags=[0, 0, 0, 0],
                eventState="normal",
                outOfService=False,
                polarity="normal",
            )
            return BACnetObjectHandle(object_id, SensorKind.BINARY, obj)

        obj = AnalogInputObject(
            objectIdentifier=identifier,
            objectName=name,
            presentValue=Real(initial_value),
            statusFlags=[0, 0, 0, 0],
            eventState="normal",
            outOfService=False,
            units=units or "noUnits",
        )
        return BACnetObjectHandle(object_id, SensorKind.ANALOG, obj)

    def add_object(self, handle: ProtocolObjectHandle) -> bool:
        if not isinstance(handle, BACnetObjectHandle):
            self.logger.error(f"Cannot add {handle!r}: not a BACnet object")
            return False
        try:
            self.app.add_object(handle.obj)
            return True
        except RuntimeError as e:
            # duplicate identifier or name
            self.logger.error(f"Device refused {handle.object_id}: {e}")
            return False

    def broadcast_discovery_announcement(self):
        self.app.i_am()


class BACnetIPStack(ProtocolStack):
    """BACnet/IP stack backed by bacpypes3."""

    async def _bring_up(self, device_id: int, device_name: str,
                        transport: TransportConfig) -> DeviceHandle:
        parser = SimpleArgumentParser()
        args = parser.parse_args([
            "--name", device_name,
            "--instance", str(device_id),
            "--address", transport.address_spec,
        ])
        app = Application.from_args(args)
        return BACnetDevice(device_id, device_name, app)

    async def _terminate(self, device: DeviceHandle):
        device.app.close()
