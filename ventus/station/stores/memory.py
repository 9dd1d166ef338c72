from itertools import count
from typing import Any, Dict, List, Optional
import logging

from ventus.shared.exceptions import DeviceNotFoundError, StoreWriteError
from ventus.shared.models import ChildDevice, ParentDevice
from .base import DeviceStore

logger = logging.getLogger(__name__)


class MemoryDeviceStore(DeviceStore):
    def __init__(self, first_id: int = 100):
        """
        In-process device store. Used for dry runs and tests; nothing
        survives the process.

        Args:
            first_id: First id handed out to created devices.
        """
        self.parents: Dict[int, ParentDevice] = {}
        self.children: Dict[int, ChildDevice] = {}
        self.attributes: Dict[int, Dict[str, Any]] = {}
        self._ids = count(first_id)

    def add_parent(self, parent_id: int, name: str, enabled: bool = True) -> ParentDevice:
        parent = ParentDevice(id=parent_id, name=name, enabled=enabled)
        self.parents[parent_id] = parent
        self.attributes.setdefault(parent_id, {})
        return parent

    def get_parent(self, parent_id: int) -> ParentDevice:
        try:
            return self.parents[parent_id]
        except KeyError:
            raise DeviceNotFoundError(f"Device {parent_id} not found") from None

    def list_children(self, parent_id: int) -> List[ChildDevice]:
        return [
            child for child_id, child in sorted(self.children.items())
            if child.parent_id == parent_id
        ]

    def create_child(self, parent_id: int, name: str, device_type: str) -> ChildDevice:
        self.get_parent(parent_id)
        child = ChildDevice(
            id=next(self._ids),
            parent_id=parent_id,
            name=name,
            device_type=device_type,
        )
        self.children[child.id] = child
        self.attributes[child.id] = {}
        return child

    def set_metadata(self, device_id: int, key: str, value: str) -> None:
        self._child(device_id).metadata[key] = value

    def get_metadata(self, device_id: int, key: str) -> Optional[str]:
        return self._child(device_id).metadata.get(key)

    def write_attribute(self, device_id: int, name: str, value: Any) -> None:
        if device_id not in self.attributes:
            raise StoreWriteError(f"Cannot write {name} on unknown device {device_id}")
        self.attributes[device_id][name] = value
        logger.debug(f"Device {device_id}: {name} = {value}")

    def attribute(self, device_id: int, name: str) -> Any:
        """Return the last written attribute value, None when never written."""
        return self.attributes.get(device_id, {}).get(name)

    def _child(self, device_id: int) -> ChildDevice:
        try:
            return self.children[device_id]
        except KeyError:
            raise DeviceNotFoundError(f"Device {device_id} not found") from None
