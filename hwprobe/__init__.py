"""Discover hardware information about the host: CPU, block storage, BIOS, baseboard and chassis."""

__version__ = "0.1.0"