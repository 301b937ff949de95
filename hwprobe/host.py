"""Discovery of hardware information about the host computer.

Covers processors, block storage and the baseboard, BIOS and chassis
information that the firmware reports.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from . import baseboard as _baseboard
from . import bios as _bios
from . import chassis as _chassis
from .baseboard import BaseboardInfo
from .bios import BIOSInfo
from .block import BlockInfo
from .block_linux import load as _load_block
from .chassis import ChassisInfo
from .context import Context
from .cpu import CPUInfo
from .cpu_load import load as _load_cpu
from .marshal import safe_json, safe_yaml


@dataclass(eq=False)
class HostInfo:
    """Everything discovered about the host system."""

    block: BlockInfo
    cpu: CPUInfo
    chassis: ChassisInfo
    bios: BIOSInfo
    baseboard: BaseboardInfo
    ctx: Optional[Context] = field(default=None, repr=False)

    def __str__(self) -> str:
        sections = (self.block, self.cpu, self.chassis, self.bios, self.baseboard)
        return "".join(f"{section}\n" for section in sections)

    def to_dict(self) -> dict[str, Any]:
        return {
            "block": self.block.to_dict(),
            "cpu": self.cpu.to_dict(),
            "chassis": self.chassis.to_dict(),
            "bios": self.bios.to_dict(),
            "baseboard": self.baseboard.to_dict(),
        }

    def _context(self) -> Context:
        return self.ctx if self.ctx is not None else Context()

    def yaml_string(self) -> str:
        """Return the host information formatted as YAML."""
        return safe_yaml(self._context(), self.to_dict())

    def json_string(self, indent: bool = False) -> str:
        """Return the host information formatted as JSON."""
        return safe_json(self._context(), self.to_dict(), indent)


def block(ctx: Optional[Context] = None) -> BlockInfo:
    """Discover the host's block storage."""
    ctx = ctx if ctx is not None else Context()
    return ctx.do(lambda: _load_block(ctx))


def cpu(ctx: Optional[Context] = None) -> CPUInfo:
    """Discover the host's processors."""
    ctx = ctx if ctx is not None else Context()
    return ctx.do(lambda: _load_cpu(ctx))


def host(ctx: Optional[Context] = None) -> HostInfo:
    """Discover everything known about the host system."""
    ctx = ctx if ctx is not None else Context()
    return HostInfo(
        block=block(ctx),
        cpu=cpu(ctx),
        chassis=_chassis.info(ctx),
        bios=_bios.info(ctx),
        baseboard=_baseboard.info(ctx),
        ctx=ctx,
    )