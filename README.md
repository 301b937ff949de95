# hwprobe

Discover hardware information about the host computer: CPU packages and
cores, block storage disks and partitions, BIOS, baseboard and chassis.

On Linux the information is read from `/proc`, `/sys` and the udev runtime
database. On macOS, CPU details come from the output of `sysctl -a`.

## Installing

```
pip install .
```

## Command line

```
hwprobe                   # everything, human-readable
hwprobe cpu               # CPU packages, cores and capabilities
hwprobe block             # disks and their partitions
hwprobe bios
hwprobe baseboard
hwprobe chassis
hwprobe version
```

Choose the output format with `--format` (`-f`): `human` (the default),
`json` or `yaml`. Add `--pretty` to indent JSON output. An unknown format
prints an error and exits with status 1, as does a failed discovery step.

```
hwprobe --format json --pretty cpu
hwprobe -f yaml block
```

With no subcommand, human output shows block storage, CPU, chassis, BIOS
and baseboard in turn; JSON and YAML output put all of them into one
document keyed by `block`, `cpu`, `chassis`, `bios` and `baseboard`.

## Library

```python
from hwprobe.context import Context
from hwprobe import host

ctx = Context()
info = host.host(ctx)
print(info)
print(info.json_string(True))
```

Each area can also be queried on its own:

```python
from hwprobe import bios, baseboard, chassis, host
from hwprobe.context import Context

ctx = Context()
print(host.cpu(ctx))        # hwprobe.cpu.CPUInfo
print(host.block(ctx))      # hwprobe.block.BlockInfo
print(bios.info(ctx))       # hwprobe.bios.BIOSInfo
print(baseboard.info(ctx))  # hwprobe.baseboard.BaseboardInfo
print(chassis.info(ctx))    # hwprobe.chassis.ChassisInfo
```

Every information object offers `to_dict()`, `json_string(indent)` and
`yaml_string()`; the serialized output of a single area is placed under a
top-level key such as `cpu` or `block`. `BlockInfo.from_dict()` rebuilds
block information from its serialized form.

Some parsing helpers are usable on their own, for example
`hwprobe.block_linux.parse_mount_entry()`, `hwprobe.block_linux.disk_types()`,
`hwprobe.cpu_load.parse_sysctl()` and `hwprobe.chassis.type_description()`.

### Reading another root

A `Context` can point discovery somewhere other than the live system:

- `chroot`: a directory, so `/sys` is read from `<chroot>/sys`;
- `path_overrides`: replacements for the `/etc`, `/proc`, `/run`, `/sys`
  and `/var` roots;
- `snapshot_path`: a tar archive (such as `.tar.gz`) that is unpacked into a
  temporary directory for the duration of a call and removed afterwards.
  With `snapshot_root` it is unpacked there instead and left in place;
  `snapshot_exclusive` skips unpacking when that directory is not empty.

Giving both a chroot and a snapshot path is an error, raised as
`ValueError` when discovery starts. Warnings go to standard error through
the context's `alerter`, unless `GHW_DISABLE_WARNINGS` is set.

`hwprobe.context.from_env()` builds a context from the `GHW_CHROOT`,
`GHW_DISABLE_TOOLS`, `GHW_SNAPSHOT_PATH`, `GHW_SNAPSHOT_ROOT` and
`GHW_SNAPSHOT_EXCLUSIVE` environment variables.

## What it does not do

- It reports only CPU, block storage, BIOS, baseboard and chassis. There is
  no memory, NUMA topology, network, GPU, PCI or product information.
- It reads snapshot archives but has no tool for creating them.
- Block storage, BIOS, baseboard and chassis discovery work on Linux only,
  and CPU discovery on Linux and macOS; elsewhere they raise `RuntimeError`.

## Running the tests

```
pip install .[test]
pytest
```