"""Block storage discovery from sysfs, the udev database and the mount table."""

from __future__ import annotations

import os
import re
import sys
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from .block import BlockInfo, Disk, DriveType, Partition, StorageController
from .linuxpath import Paths, paths_for
from .sysfs import UNKNOWN, safe_int_from_file

SECTOR_SIZE = 512

# Checked in order; the first matching prefix decides the drive type and controller.
_DISK_PREFIXES = (
    ("fd", DriveType.FDD, StorageController.UNKNOWN),
    ("sd", DriveType.HDD, StorageController.SCSI),
    ("hd", DriveType.HDD, StorageController.IDE),
    ("vd", DriveType.HDD, StorageController.VIRTIO),
    ("nvme", DriveType.SSD, StorageController.NVME),
    ("sr", DriveType.ODD, StorageController.SCSI),
    ("xvd", DriveType.HDD, StorageController.SCSI),
    ("mmc", DriveType.SSD, StorageController.MMC),
    ("loop", DriveType.VIRTUAL, StorageController.LOOP),
)

_MOUNT_ESCAPES = {"\\011": "\t", "\\012": "\n", "\\040": " ", "\\\\": "\\"}
_MOUNT_ESCAPE_RE = re.compile("|".join(re.escape(key) for key in _MOUNT_ESCAPES))


@dataclass
class MountEntry:
    """One line of the mount table."""

    partition: str
    mountpoint: str
    filesystem_type: str
    options: list[str] = field(default_factory=list)


def _read_text(path: str) -> str:
    with open(path, encoding="utf-8", errors="replace") as handle:
        return handle.read()


def _read_uint(path: str) -> int:
    """Return the unsigned integer held in a file, or 0 if unreadable or invalid."""
    try:
        text = _read_text(path).strip()
    except OSError:
        return 0
    return int(text) if text.isdigit() else 0


def _first_of(info: Mapping[str, str], keys: Iterable[str]) -> str:
    return next((info[key] for key in keys if key in info), UNKNOWN)


def load(ctx) -> BlockInfo:
    """Discover block storage for the given (already set up) context."""
    if not sys.platform.startswith("linux"):
        raise RuntimeError(f"block information is not available on {sys.platform}")
    found = disks(ctx, paths_for(ctx))
    total = sum(disk.size_bytes for disk in found)
    return BlockInfo(
        total_size_bytes=total,
        total_physical_bytes=total,
        disks=found,
        partitions=[part for disk in found for part in disk.partitions],
        ctx=ctx,
    )


def disk_types(name: str) -> tuple[DriveType, StorageController]:
    """Guess the drive type and storage controller from a device name."""
    for prefix, drive_type, controller in _DISK_PREFIXES:
        if name.startswith(prefix):
            return drive_type, controller
    return DriveType.UNKNOWN, StorageController.UNKNOWN


def _disk_is_rotational(ctx, paths: Paths, name: str) -> bool:
    path = os.path.join(paths.sys_block, name, "queue", "rotational")
    return safe_int_from_file(ctx, path) == 1


def _disk_size_bytes(paths: Paths, name: str) -> int:
    return _read_uint(os.path.join(paths.sys_block, name, "size")) * SECTOR_SIZE


def _disk_physical_block_size_bytes(paths: Paths, name: str) -> int:
    return _read_uint(os.path.join(paths.sys_block, name, "queue", "physical_block_size"))


def _disk_numa_node_id(paths: Paths, name: str) -> int:
    try:
        link = os.readlink(os.path.join(paths.sys_block, name))
    except OSError:
        return -1
    if not link.startswith("../devices/"):
        return -1
    try:
        text = _read_text(os.path.join(paths.sys_block, link, "numa_node")).strip()
    except OSError:
        return -1
    try:
        return int(text)
    except ValueError:
        return -1


def _disk_vendor(paths: Paths, name: str) -> str:
    try:
        return _read_text(os.path.join(paths.sys_block, name, "device", "vendor")).strip()
    except OSError:
        return UNKNOWN


def _disk_is_removable(paths: Paths, name: str) -> bool:
    try:
        return _read_text(os.path.join(paths.sys_block, name, "removable")).strip() == "1"
    except OSError:
        return False


def udev_info(paths: Paths, dev_no: str) -> dict[str, str]:
    """Return the udev properties of a block device given as "major:minor".

    Raises OSError when the device has no entry in the udev database.
    """
    udev_id = "b" + dev_no.strip()
    contents = _read_text(os.path.join(paths.run_udev_data, udev_id))
    result: dict[str, str] = {}
    for line in contents.split("\n"):
        if not line.startswith("E:"):
            continue
        key, sep, value = line[2:].partition("=")
        if sep:
            result[key] = value
    return result


def _udev_info_disk(paths: Paths, disk: str) -> Optional[dict[str, str]]:
    try:
        dev_no = _read_text(os.path.join(paths.sys_block, disk, "dev"))
        return udev_info(paths, dev_no)
    except OSError:
        return None


def _udev_info_partition(paths: Paths, disk: str, partition: str) -> Optional[dict[str, str]]:
    try:
        dev_no = _read_text(os.path.join(paths.sys_block, disk, partition, "dev"))
        return udev_info(paths, dev_no)
    except OSError:
        return None


def _partition_udev_value(paths: Paths, disk: str, partition: str, key: str) -> str:
    info = _udev_info_partition(paths, disk, partition)
    if info is None:
        return UNKNOWN
    return info.get(key, UNKNOWN)


def disk_part_label(paths: Paths, disk: str, partition: str) -> str:
    """Return the partition entry name recorded by udev, or UNKNOWN."""
    return _partition_udev_value(paths, disk, partition, "ID_PART_ENTRY_NAME")


def disk_fs_label(paths: Paths, disk: str, partition: str) -> str:
    """Return the filesystem label recorded by udev, or UNKNOWN."""
    return _partition_udev_value(paths, disk, partition, "ID_FS_LABEL")


def disk_part_type_udev(paths: Paths, disk: str, partition: str) -> str:
    """Return the filesystem type recorded by udev, or UNKNOWN."""
    return _partition_udev_value(paths, disk, partition, "ID_FS_TYPE")


def disk_part_uuid(paths: Paths, disk: str, partition: str) -> str:
    """Return the partition entry UUID recorded by udev, or UNKNOWN."""
    return _partition_udev_value(paths, disk, partition, "ID_PART_ENTRY_UUID")


def parse_mount_entry(line: str) -> Optional[MountEntry]:
    """Parse a mount table line, or return None if it is not a device mount."""
    if not line.startswith("/"):
        return None
    fields = line.split()
    if len(fields) < 4:
        return None
    mountpoint = _MOUNT_ESCAPE_RE.sub(lambda m: _MOUNT_ESCAPES[m.group(0)], fields[1])
    return MountEntry(
        partition=fields[0],
        mountpoint=mountpoint,
        filesystem_type=fields[2],
        options=fields[3].split(","),
    )


def partition_info(paths: Paths, part: str) -> tuple[str, str, bool]:
    """Return the mount point, filesystem type and read-only flag of a partition."""
    if not part.startswith("/dev"):
        part = "/dev/" + part
    try:
        handle = open(paths.proc_mounts, encoding="utf-8", errors="replace")
    except OSError:
        return "", "", True
    with handle:
        for line in handle:
            entry = parse_mount_entry(line.rstrip("\n"))
            if entry is None or entry.partition != part:
                continue
            return entry.mountpoint, entry.filesystem_type, "rw" not in entry.options
    return "", "", True


def _disk_partitions(ctx, paths: Paths, disk: str) -> list[Partition]:
    try:
        names = sorted(os.listdir(os.path.join(paths.sys_block, disk)))
    except OSError as exc:
        ctx.warn("failed to read disk partitions: %s\n", exc)
        return []
    partitions = []
    for name in names:
        if not name.startswith(disk):
            continue
        mount_point, part_type, read_only = partition_info(paths, name)
        if not part_type:
            part_type = disk_part_type_udev(paths, disk, name)
        partitions.append(
            Partition(
                name=name,
                size_bytes=_read_uint(os.path.join(paths.sys_block, disk, name, "size"))
                * SECTOR_SIZE,
                mount_point=mount_point,
                type=part_type,
                is_read_only=read_only,
                uuid=disk_part_uuid(paths, disk, name),
                label=disk_part_label(paths, disk, name),
                filesystem_label=disk_fs_label(paths, disk, name),
            )
        )
    return partitions


def disks(ctx, paths: Paths) -> list[Disk]:
    """Return every disk listed under the sysfs block directory."""
    try:
        names = sorted(os.listdir(paths.sys_block))
    except OSError:
        return []
    result = []
    for name in names:
        drive_type, controller = disk_types(name)
        if not _disk_is_rotational(ctx, paths, name):
            drive_type = DriveType.SSD
        size = _disk_size_bytes(paths, name)
        if controller is StorageController.LOOP and size == 0:
            # Unused loop devices are of no interest.
            continue
        udev = _udev_info_disk(paths, name) or {}
        disk = Disk(
            name=name,
            size_bytes=size,
            physical_block_size_bytes=_disk_physical_block_size_bytes(paths, name),
            drive_type=drive_type,
            is_removable=_disk_is_removable(paths, name),
            storage_controller=controller,
            bus_path=_first_of(udev, ("ID_PATH",)),
            numa_node_id=_disk_numa_node_id(paths, name),
            vendor=_disk_vendor(paths, name),
            model=_first_of(udev, ("ID_MODEL",)),
            serial_number=_first_of(
                udev,
                ("SCSI_IDENT_SERIAL", "ID_SCSI_SERIAL", "ID_SERIAL_SHORT", "ID_SERIAL"),
            ),
            wwn=_first_of(udev, ("ID_WWN_WITH_EXTENSION", "ID_WWN")),
            wwn_no_extension=_first_of(udev, ("ID_WWN",)),
        )
        disk.partitions = _disk_partitions(ctx, paths, name)
        for part in disk.partitions:
            part.disk = disk
        result.append(disk)
    return result