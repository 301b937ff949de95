"""BIOS release information."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Any, Optional

from .context import Context
from .marshal import safe_json, safe_yaml
from .sysfs import UNKNOWN, dmi_item


@dataclass
class BIOSInfo:
    """BIOS release information."""

    vendor: str = ""
    version: str = ""
    date: str = ""
    ctx: Optional[Context] = field(default=None, repr=False, compare=False)

    def __str__(self) -> str:
        vendor = f" vendor={self.vendor}" if self.vendor else ""
        version = f" version={self.version}" if self.version else ""
        date = f" date={self.date}" if self.date and self.date != UNKNOWN else ""
        return f"bios{vendor}{version}{date}"

    def to_dict(self) -> dict[str, Any]:
        return {"vendor": self.vendor, "version": self.version, "date": self.date}

    def _context(self) -> Context:
        return self.ctx if self.ctx is not None else Context()

    def yaml_string(self) -> str:
        """Return the information as YAML under a top-level "bios" key."""
        return safe_yaml(self._context(), {"bios": self.to_dict()})

    def json_string(self, indent: bool = False) -> str:
        """Return the information as JSON under a top-level "bios" key."""
        return safe_json(self._context(), {"bios": self.to_dict()}, indent)


def _load(result: BIOSInfo) -> None:
    if not sys.platform.startswith("linux"):
        raise RuntimeError(f"BIOS information is not available on {sys.platform}")
    ctx = result.ctx
    result.vendor = dmi_item(ctx, "bios_vendor")
    result.version = dmi_item(ctx, "bios_version")
    result.date = dmi_item(ctx, "bios_date")


def info(ctx: Optional[Context] = None) -> BIOSInfo:
    """Discover the host's BIOS."""
    ctx = ctx if ctx is not None else Context()
    result = BIOSInfo(ctx=ctx)
    ctx.do(lambda: _load(result))
    return result