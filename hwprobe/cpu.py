"""Data model for central processing units on a host."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .context import Context
from .marshal import safe_json, safe_yaml


def _plural(count: int, singular: str, plural: str) -> str:
    return singular if count == 1 else plural


@dataclass
class ProcessorCore:
    """A physical processor core and the logical processors on it."""

    id: int = 0
    num_threads: int = 0
    logical_processors: list[int] = field(default_factory=list)

    def __str__(self) -> str:
        lps = " ".join(str(lp) for lp in self.logical_processors)
        return (
            f"processor core #{self.id} ({self.num_threads} threads), "
            f"logical processors [{lps}]"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "total_threads": self.num_threads,
            "logical_processors": list(self.logical_processors),
        }


@dataclass
class Processor:
    """A physical processor package."""

    id: int = 0
    num_cores: int = 0
    num_threads: int = 0
    vendor: str = ""
    model: str = ""
    capabilities: list[str] = field(default_factory=list)
    cores: list[ProcessorCore] = field(default_factory=list)

    def core_by_id(self, core_id: int) -> Optional[ProcessorCore]:
        """Return the core with the given ID, or None."""
        return next((core for core in self.cores if core.id == core_id), None)

    def has_capability(self, find: str) -> bool:
        """Return whether the processor reports the given cpuid capability."""
        return find in self.capabilities

    def __str__(self) -> str:
        return (
            f"physical package #{self.id} "
            f"({self.num_cores} {_plural(self.num_cores, 'core', 'cores')}, "
            f"{self.num_threads} hardware "
            f"{_plural(self.num_threads, 'thread', 'threads')})"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "total_cores": self.num_cores,
            "total_threads": self.num_threads,
            "vendor": self.vendor,
            "model": self.model,
            "capabilities": list(self.capabilities),
            "cores": [core.to_dict() for core in self.cores],
        }


@dataclass
class CPUInfo:
    """All processor packages on a host."""

    total_cores: int = 0
    total_threads: int = 0
    processors: list[Processor] = field(default_factory=list)
    ctx: Optional[Context] = field(default=None, repr=False, compare=False)

    def __str__(self) -> str:
        count = len(self.processors)
        return (
            f"cpu ({count} physical {_plural(count, 'package', 'packages')}, "
            f"{self.total_cores} {_plural(self.total_cores, 'core', 'cores')}, "
            f"{self.total_threads} hardware "
            f"{_plural(self.total_threads, 'thread', 'threads')})"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_cores": self.total_cores,
            "total_threads": self.total_threads,
            "processors": [proc.to_dict() for proc in self.processors],
        }

    def _context(self) -> Context:
        return self.ctx if self.ctx is not None else Context()

    def yaml_string(self) -> str:
        """Return the information as YAML under a top-level "cpu" key."""
        return safe_yaml(self._context(), {"cpu": self.to_dict()})

    def json_string(self, indent: bool = False) -> str:
        """Return the information as JSON under a top-level "cpu" key."""
        return safe_json(self._context(), {"cpu": self.to_dict()}, indent)