"""Baseboard (motherboard) information."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Any, Optional

from .context import Context
from .marshal import safe_json, safe_yaml
from .sysfs import UNKNOWN, concat_strings, dmi_item


@dataclass
class BaseboardInfo:
    """Baseboard release information."""

    asset_tag: str = ""
    serial_number: str = ""
    vendor: str = ""
    version: str = ""
    product: str = ""
    ctx: Optional[Context] = field(default=None, repr=False, compare=False)

    def __str__(self) -> str:
        vendor = f" vendor={self.vendor}" if self.vendor else ""
        serial = (
            f" serial={self.serial_number}"
            if self.serial_number and self.serial_number != UNKNOWN
            else ""
        )
        version = f" version={self.version}" if self.version else ""
        product = f" product={self.product}" if self.product else ""
        return "baseboard" + concat_strings(vendor, serial, version, product)

    def to_dict(self) -> dict[str, Any]:
        return {
            "asset_tag": self.asset_tag,
            "serial_number": self.serial_number,
            "vendor": self.vendor,
            "version": self.version,
            "product": self.product,
        }

    def _context(self) -> Context:
        return self.ctx if self.ctx is not None else Context()

    def yaml_string(self) -> str:
        """Return the information as YAML under a top-level "baseboard" key."""
        return safe_yaml(self._context(), {"baseboard": self.to_dict()})

    def json_string(self, indent: bool = False) -> str:
        """Return the information as JSON under a top-level "baseboard" key."""
        return safe_json(self._context(), {"baseboard": self.to_dict()}, indent)


def _load(result: BaseboardInfo) -> None:
    if not sys.platform.startswith("linux"):
        raise RuntimeError(f"baseboard information is not available on {sys.platform}")
    ctx = result.ctx
    result.asset_tag = dmi_item(ctx, "board_asset_tag")
    result.serial_number = dmi_item(ctx, "board_serial")
    result.vendor = dmi_item(ctx, "board_vendor")
    result.version = dmi_item(ctx, "board_version")
    result.product = dmi_item(ctx, "board_name")


def info(ctx: Optional[Context] = None) -> BaseboardInfo:
    """Discover the host's baseboard."""
    ctx = ctx if ctx is not None else Context()
    result = BaseboardInfo(ctx=ctx)
    ctx.do(lambda: _load(result))
    return result