"""Data model for block storage: disks, partitions and their totals."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from .context import Context
from .marshal import safe_json, safe_yaml
from .sysfs import UNKNOWN, concat_strings

KB = 1024
MB = KB * 1024
GB = MB * 1024
TB = GB * 1024
PB = TB * 1024
EB = PB * 1024

_UNITS = ((MB, KB, "KB"), (GB, MB, "MB"), (TB, GB, "GB"), (PB, TB, "TB"), (EB, PB, "PB"))


def amount_string(size: int) -> tuple[int, str]:
    """Return the unit divisor and unit name best suited to show ``size`` bytes."""
    for limit, unit, name in _UNITS:
        if size < limit:
            return unit, name
    return EB, "EB"


def _size_string(size: int) -> str:
    if size <= 0:
        return UNKNOWN
    unit, name = amount_string(size)
    return f"{-(-size // unit)}{name}"


def _member_from_json(labels: Mapping[Any, str], kind: str, value: Any) -> Any:
    if not isinstance(value, str):
        raise ValueError(f"{kind} must be a string, got {value!r}")
    key = value.lower()
    for member, label in labels.items():
        if label.lower() == key:
            return member
    raise ValueError(f"unknown {kind}: {key!r}")


class DriveType(enum.Enum):
    """General category of a drive device."""

    UNKNOWN = 0
    HDD = 1
    FDD = 2
    ODD = 3
    SSD = 4
    VIRTUAL = 5

    @property
    def label(self) -> str:
        return _DRIVE_TYPE_LABELS[self]

    def __str__(self) -> str:
        return self.label

    def to_json(self) -> str:
        """Return the lowercase serialized name."""
        return self.label.lower()

    @classmethod
    def from_json(cls, value: Any) -> "DriveType":
        """Return the drive type whose serialized name matches ``value``, ignoring case."""
        return _member_from_json(_DRIVE_TYPE_LABELS, "drive type", value)


_DRIVE_TYPE_LABELS = {
    DriveType.UNKNOWN: "Unknown",
    DriveType.HDD: "HDD",
    DriveType.FDD: "FDD",
    DriveType.ODD: "ODD",
    DriveType.SSD: "SSD",
    DriveType.VIRTUAL: "virtual",
}


class StorageController(enum.Enum):
    """Category of block storage controller or driver."""

    UNKNOWN = 0
    IDE = 1
    SCSI = 2
    NVME = 3
    VIRTIO = 4
    MMC = 5
    LOOP = 6

    @property
    def label(self) -> str:
        return _STORAGE_CONTROLLER_LABELS[self]

    def __str__(self) -> str:
        return self.label

    def to_json(self) -> str:
        """Return the lowercase serialized name."""
        return self.label.lower()

    @classmethod
    def from_json(cls, value: Any) -> "StorageController":
        """Return the controller whose serialized name matches ``value``, ignoring case."""
        return _member_from_json(_STORAGE_CONTROLLER_LABELS, "storage controller", value)


_STORAGE_CONTROLLER_LABELS = {
    StorageController.UNKNOWN: "Unknown",
    StorageController.IDE: "IDE",
    StorageController.SCSI: "SCSI",
    StorageController.NVME: "NVMe",
    StorageController.VIRTIO: "virtio",
    StorageController.MMC: "MMC",
    StorageController.LOOP: "loop",
}


@dataclass(eq=False)
class Partition:
    """A logical division of a disk."""

    name: str = ""
    label: str = ""
    mount_point: str = ""
    size_bytes: int = 0
    type: str = ""
    is_read_only: bool = False
    uuid: str = ""
    filesystem_label: str = ""
    disk: Optional["Disk"] = field(default=None, repr=False)

    def __str__(self) -> str:
        type_str = f"[{self.type}]" if self.type else ""
        mount_str = f" mounted@{self.mount_point}" if self.mount_point else ""
        return f"{self.name} ({_size_string(self.size_bytes)}) {type_str}{mount_str}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "mount_point": self.mount_point,
            "size_bytes": self.size_bytes,
            "type": self.type,
            "read_only": self.is_read_only,
            "uuid": self.uuid,
            "filesystem_label": self.filesystem_label,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Partition":
        return cls(
            name=data.get("name", ""),
            label=data.get("label", ""),
            mount_point=data.get("mount_point", ""),
            size_bytes=int(data.get("size_bytes", 0)),
            type=data.get("type", ""),
            is_read_only=bool(data.get("read_only", False)),
            uuid=data.get("uuid", ""),
            filesystem_label=data.get("filesystem_label", ""),
        )


@dataclass(eq=False)
class Disk:
    """A single disk drive providing raw block storage."""

    name: str = ""
    size_bytes: int = 0
    physical_block_size_bytes: int = 0
    drive_type: DriveType = DriveType.UNKNOWN
    is_removable: bool = False
    storage_controller: StorageController = StorageController.UNKNOWN
    bus_path: str = ""
    numa_node_id: int = -1
    vendor: str = ""
    model: str = ""
    serial_number: str = ""
    wwn: str = ""
    wwn_no_extension: str = ""
    partitions: list[Partition] = field(default_factory=list)

    def __str__(self) -> str:
        at_node = f" (node #{self.numa_node_id})" if self.numa_node_id >= 0 else ""
        vendor = f" vendor={self.vendor}" if self.vendor else ""
        model = f" model={self.model}" if self.model != UNKNOWN else ""
        serial = f" serial={self.serial_number}" if self.serial_number != UNKNOWN else ""
        wwn = f" WWN={self.wwn}" if self.wwn != UNKNOWN else ""
        removable = " removable=true" if self.is_removable else ""
        return (
            f"{self.name} {self.drive_type} ({_size_string(self.size_bytes)}) "
            f"{self.storage_controller} [@{self.bus_path}{at_node}]"
            + concat_strings(vendor, model, serial, wwn, removable)
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "size_bytes": self.size_bytes,
            "physical_block_size_bytes": self.physical_block_size_bytes,
            "drive_type": self.drive_type.to_json(),
            "removable": self.is_removable,
            "storage_controller": self.storage_controller.to_json(),
            "bus_path": self.bus_path,
            "vendor": self.vendor,
            "model": self.model,
            "serial_number": self.serial_number,
            "wwn": self.wwn,
            "wwnNoExtension": self.wwn_no_extension,
            "partitions": [part.to_dict() for part in self.partitions],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Disk":
        """Build a disk from its serialized form, linking its partitions back to it."""
        drive_type = data.get("drive_type")
        controller = data.get("storage_controller")
        disk = cls(
            name=data.get("name", ""),
            size_bytes=int(data.get("size_bytes", 0)),
            physical_block_size_bytes=int(data.get("physical_block_size_bytes", 0)),
            drive_type=(
                DriveType.from_json(drive_type) if drive_type is not None else DriveType.UNKNOWN
            ),
            is_removable=bool(data.get("removable", False)),
            storage_controller=(
                StorageController.from_json(controller)
                if controller is not None
                else StorageController.UNKNOWN
            ),
            bus_path=data.get("bus_path", ""),
            vendor=data.get("vendor", ""),
            model=data.get("model", ""),
            serial_number=data.get("serial_number", ""),
            wwn=data.get("wwn", ""),
            wwn_no_extension=data.get("wwnNoExtension", ""),
        )
        for part_data in data.get("partitions") or []:
            part = Partition.from_dict(part_data)
            part.disk = disk
            disk.partitions.append(part)
        return disk


@dataclass(eq=False)
class BlockInfo:
    """All disk drives and partitions on a host."""

    total_size_bytes: int = 0
    total_physical_bytes: int = 0
    disks: list[Disk] = field(default_factory=list)
    partitions: list[Partition] = field(default_factory=list)
    ctx: Optional[Context] = field(default=None, repr=False)

    def __str__(self) -> str:
        count = len(self.disks)
        plural = "disk" if count == 1 else "disks"
        return (
            f"block storage ({count} {plural}, "
            f"{_size_string(self.total_physical_bytes)} physical storage)"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_size_bytes": self.total_size_bytes,
            "disks": [disk.to_dict() for disk in self.disks],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BlockInfo":
        """Build block information from its serialized form."""
        total = int(data.get("total_size_bytes", 0))
        disks = [Disk.from_dict(item) for item in data.get("disks") or []]
        return cls(
            total_size_bytes=total,
            total_physical_bytes=total,
            disks=disks,
            partitions=[part for disk in disks for part in disk.partitions],
        )

    def _context(self) -> Context:
        return self.ctx if self.ctx is not None else Context()

    def yaml_string(self) -> str:
        """Return the information as YAML under a top-level "block" key."""
        return safe_yaml(self._context(), {"block": self.to_dict()})

    def json_string(self, indent: bool = False) -> str:
        """Return the information as JSON under a top-level "block" key."""
        return safe_json(self._context(), {"block": self.to_dict()}, indent)