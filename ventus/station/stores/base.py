"""Base class for device stores."""

from abc import ABC, abstractmethod
from typing import Any, List, Optional

from ventus.shared.models import ChildDevice, ParentDevice


class DeviceStore(ABC):
    """Device-management backend holding the station and its sensor children."""

    @abstractmethod
    def get_parent(self, parent_id: int) -> ParentDevice:
        """Return the parent device.

        Raises:
            DeviceNotFoundError: If the device does not exist.
        """
        pass

    @abstractmethod
    def list_children(self, parent_id: int) -> List[ChildDevice]:
        """Return all child devices of a parent, ordered by id."""
        pass

    @abstractmethod
    def create_child(self, parent_id: int, name: str, device_type: str) -> ChildDevice:
        """Create a child device with no initial value."""
        pass

    @abstractmethod
    def set_metadata(self, device_id: int, key: str, value: str) -> None:
        """Persist a metadata variable on a device."""
        pass

    @abstractmethod
    def get_metadata(self, device_id: int, key: str) -> Optional[str]:
        """Read a metadata variable, None when unset."""
        pass

    @abstractmethod
    def write_attribute(self, device_id: int, name: str, value: Any) -> None:
        """Write a displayed attribute (value, log, unit, station labels).

        Raises:
            StoreWriteError: If the write fails.
        """
        pass

    def close(self) -> None:
        """Release any held resources."""
        pass
