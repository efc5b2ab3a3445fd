"""Sensor id -> protocol object mapping with idempotent creation against a device."""
from __future__ import annotations
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Iterable, List, Optional

from sensor_gateway.core.exceptions import RegistrationError
from sensor_gateway.models.sensor_models import Reading, SensorDefinition
from sensor_gateway.protocols.base_stack import DeviceHandle, PropertyId, ProtocolObjectHandle


class ObjectRegistry:
    """
    Owns the mapping from sensor id to the protocol object serving it.

    ``ensure`` adopts an object already present on the device or creates a
    new one, so running setup twice against the same device never produces
    two objects for one sensor. Every present-value write goes through the
    per-handle lock; other writers must use ``exclusive``.
    """

    def __init__(self, device: DeviceHandle):
        self.device = device
        self.log = logging.getLogger(self.__class__.__name__)
        self._handles: Dict[int, ProtocolObjectHandle] = {}
        self._locks:   Dict[int, asyncio.Lock] = {}

    # --------------------------------------------------------------------- #
    #  Setup
    # --------------------------------------------------------------------- #
    def ensure(self, definition: SensorDefinition) -> Optional[ProtocolObjectHandle]:
        """Adopt or create the object for *definition*; None when that fails."""
        try:
            handle = self._adopt_or_create(definition)
        except Exception as e:
            self.log.error("could not register sensor %d (%s): %s",
                           definition.id, definition.display_name, e)
            return None
        self._handles[definition.id] = handle
        self._locks.setdefault(definition.id, asyncio.Lock())
        return handle

    def ensure_all(self, definitions: Iterable[SensorDefinition]) -> int:
        """Ensure every definition; returns how many are registered afterwards."""
        for definition in definitions:
            self.ensure(definition)
        self.log.info("registry holds %d objects", len(self._handles))
        return len(self._handles)

    def _adopt_or_create(self, definition: SensorDefinition) -> ProtocolObjectHandle:
        object_id = definition.object_id
        existing = self.device.get_object(object_id)
        if existing is not None:
            if existing.kind is not definition.kind:
                raise RegistrationError(
                    f"object {object_id} exists but serves {getattr(existing.kind, 'value', None)!r}, "
                    f"not {definition.kind.value!r}"
                )
            self.log.warning("object %s already exists, using the existing object (%s)",
                             object_id, existing.name)
            return existing

        handle = self.device.create_object(
            object_id,
            definition.display_name,
            definition.kind.default_value,
            definition.units,
        )
        if not self.device.add_object(handle):
            raise RegistrationError(f"device {self.device.device_id} refused object {object_id}")
        self.log.info("created %s %r", object_id, definition.display_name)
        return handle

    # --------------------------------------------------------------------- #
    #  Access
    # --------------------------------------------------------------------- #
    def get(self, sensor_id: int) -> Optional[ProtocolObjectHandle]:
        return self._handles.get(sensor_id)

    def sensor_ids(self) -> List[int]:
        return list(self._handles)

    def __len__(self):
        return len(self._handles)

    def __contains__(self, sensor_id):
        return sensor_id in self._handles

    @asynccontextmanager
    async def exclusive(self, sensor_id: int) -> AsyncIterator[ProtocolObjectHandle]:
        """Hold the handle's lock for the duration of the block."""
        handle = self._handles.get(sensor_id)
        if handle is None:
            raise KeyError(f"sensor {sensor_id} is not registered")
        async with self._locks[sensor_id]:
            yield handle

    async def write_value(self, sensor_id: int, reading: Reading) -> bool:
        """Write *reading* into the sensor's present value; False on any failure."""
        handle = self._handles.get(sensor_id)
        if handle is None:
            self.log.error("write failed: sensor %d is not registered", sensor_id)
            return False
        if handle.kind is None or not handle.kind.accepts(reading):
            self.log.error("write failed: %s reading %r does not match %s sensor %d",
                           type(reading).__name__, reading,
                           getattr(handle.kind, "value", "unknown"), sensor_id)
            return False

        async with self.exclusive(sensor_id) as locked:
            ok = locked.write_property(PropertyId.PRESENT_VALUE, reading)
        if ok:
            self.log.info("updated %s to %s", locked.name, reading)
        else:
            self.log.error("write failed: %s rejected present value %r", locked.object_id, reading)
        return ok
