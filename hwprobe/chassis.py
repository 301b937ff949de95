"""Chassis information."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Any, Optional

from .context import Context
from .marshal import safe_json, safe_yaml
from .sysfs import UNKNOWN, concat_strings, dmi_item

# SMBIOS chassis type names, in code order starting at 1.
_TYPE_NAMES = (
    "Other", "Unknown", "Desktop", "Low profile desktop", "Pizza box",
    "Mini tower", "Tower", "Portable", "Laptop", "Notebook", "Hand held",
    "Docking station", "All in one", "Sub notebook", "Space-saving",
    "Lunch box", "Main server chassis", "Expansion chassis", "SubChassis",
    "Bus Expansion chassis", "Peripheral chassis", "RAID chassis",
    "Rack mount chassis", "Sealed-case PC", "Multi-system chassis",
    "Compact PCI", "Advanced TCA", "Blade", "Blade enclosure", "Tablet",
    "Convertible", "Detachable", "IoT gateway", "Embedded PC", "Mini PC",
    "Stick PC",
)

_DESCRIPTIONS = {str(code): name for code, name in enumerate(_TYPE_NAMES, start=1)}


def type_description(chassis_type: str) -> str:
    """Return the description of a DMI chassis type code, or UNKNOWN."""
    return _DESCRIPTIONS.get(chassis_type, UNKNOWN)


@dataclass
class ChassisInfo:
    """Chassis release information."""

    asset_tag: str = ""
    serial_number: str = ""
    type: str = ""
    type_description: str = ""
    vendor: str = ""
    version: str = ""
    ctx: Optional[Context] = field(default=None, repr=False, compare=False)

    def __str__(self) -> str:
        parts = [self.type_description]
        if self.vendor:
            parts.append(f" vendor={self.vendor}")
        if self.serial_number and self.serial_number != UNKNOWN:
            parts.append(f" serial={self.serial_number}")
        if self.version:
            parts.append(f" version={self.version}")
        return "chassis type=" + concat_strings(*parts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "asset_tag": self.asset_tag,
            "serial_number": self.serial_number,
            "type": self.type,
            "type_description": self.type_description,
            "vendor": self.vendor,
            "version": self.version,
        }

    def _context(self) -> Context:
        return self.ctx if self.ctx is not None else Context()

    def yaml_string(self) -> str:
        """Return the information as YAML under a top-level "chassis" key."""
        return safe_yaml(self._context(), {"chassis": self.to_dict()})

    def json_string(self, indent: bool = False) -> str:
        """Return the information as JSON under a top-level "chassis" key."""
        return safe_json(self._context(), {"chassis": self.to_dict()}, indent)


_DMI_FIELDS = (
    ("asset_tag", "chassis_asset_tag"),
    ("serial_number", "chassis_serial"),
    ("type", "chassis_type"),
    ("vendor", "chassis_vendor"),
    ("version", "chassis_version"),
)


def _load(result: ChassisInfo) -> None:
    if not sys.platform.startswith("linux"):
        raise RuntimeError(f"chassis information is not available on {sys.platform}")
    for attr, item in _DMI_FIELDS:
        setattr(result, attr, dmi_item(result.ctx, item))
    result.type_description = type_description(result.type)


def info(ctx: Optional[Context] = None) -> ChassisInfo:
    """Discover the host's chassis."""
    ctx = ctx if ctx is not None else Context()
    result = ChassisInfo(ctx=ctx)
    ctx.do(lambda: _load(result))
    return result