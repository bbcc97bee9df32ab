"""Snapshot provider: one consistent view of host metrics per tick.

psutil keeps internal state between calls (CPU percentages are deltas since
the previous sample), so the provider is a long-lived object and every
``refresh()`` builds a brand new immutable ``Snapshot``.
"""

from __future__ import annotations

import platform
import resource
import socket
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

import psutil

UNKNOWN = "Unknown"

_CPUINFO = Path("/proc/cpuinfo")
_DMI_DIR = Path("/sys/class/dmi/id")
_BRAND_FIELDS = ("model name", "Processor", "Hardware")
_PROC_ATTRS = ["pid", "name", "cpu_percent", "memory_info"]


# ── Data types ─────────────────────────────────────────────────────────────


@dataclass(slots=True, frozen=True)
class ProcessInfo:
    """One row of the process table."""

    pid: int
    name: str
    cpu_percent: float  # 0.0 - 100.0 * core_count
    memory_kb: int


@dataclass(slots=True, frozen=True)
class HostInfo:
    """Static host facts. ``None`` means the fact could not be determined."""

    architecture: str | None = None
    uptime: str | None = None
    kernel_version: str | None = None
    os_version: str | None = None
    hostname: str | None = None
    open_files_limit: str | None = None
    product_name: str | None = None
    vendor_name: str | None = None


@dataclass(slots=True, frozen=True)
class Snapshot:
    """Immutable view of system state produced by a single refresh."""

    cores: tuple[float, ...] = ()
    cpu_brand: str = UNKNOWN
    memory_total_mb: int = 0
    memory_used_mb: int = 0
    swap_total_mb: int = 0
    swap_used_mb: int = 0
    processes: Mapping[int, ProcessInfo] = field(
        default_factory=lambda: MappingProxyType({})
    )
    host_info: HostInfo = field(default_factory=HostInfo)


# ── Shape adaptation ───────────────────────────────────────────────────────


def _to_mb(value: int) -> int:
    return max(0, int(value)) // 1024 // 1024


def _clamped_pair(total_bytes: int, used_bytes: int) -> tuple[int, int]:
    """Convert (total, used) to MB keeping ``0 <= used <= total``."""
    total = _to_mb(total_bytes)
    used = min(_to_mb(used_bytes), total)
    return total, used


def format_uptime(seconds: float) -> str:
    """Format an uptime in seconds as ``N days, HH:MM:SS`` or ``HH:MM:SS``."""
    seconds = max(0.0, seconds)
    days = int(seconds // 86400)
    hours = int((seconds % 86400) // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    if days > 0:
        return f"{days} days, {hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def _read_text(path: Path) -> str | None:
    try:
        text = path.read_text(encoding="utf-8", errors="replace").strip()
    except OSError:
        return None
    return text or None


def read_cpu_brand(cpuinfo: Path = _CPUINFO) -> str:
    """Return the CPU model string, or ``"Unknown"``."""
    text = _read_text(cpuinfo)
    if text:
        for line in text.splitlines():
            key, sep, value = line.partition(":")
            if sep and key.strip() in _BRAND_FIELDS and value.strip():
                return value.strip()
    return platform.processor() or UNKNOWN


def _os_version() -> str | None:
    try:
        release = platform.freedesktop_os_release()
    except OSError:
        return platform.platform() or None
    return release.get("PRETTY_NAME") or release.get("NAME") or None


def _open_files_limit() -> str | None:
    try:
        soft, _hard = resource.getrlimit(resource.RLIMIT_NOFILE)
    except (OSError, ValueError):
        return None
    if soft == resource.RLIM_INFINITY:
        return "unlimited"
    return str(soft)


def read_host_info(dmi_dir: Path = _DMI_DIR) -> HostInfo:
    """Collect the static host facts; each one independently optional."""
    try:
        uptime: str | None = format_uptime(time.time() - psutil.boot_time())
    except (psutil.Error, OSError):
        uptime = None
    try:
        hostname: str | None = socket.gethostname() or None
    except OSError:
        hostname = None
    return HostInfo(
        architecture=platform.machine() or None,
        uptime=uptime,
        kernel_version=platform.release() or None,
        os_version=_os_version(),
        hostname=hostname,
        open_files_limit=_open_files_limit(),
        product_name=_read_text(dmi_dir / "product_name"),
        vendor_name=_read_text(dmi_dir / "sys_vendor"),
    )


def process_from_info(info: dict) -> ProcessInfo:
    """Adapt a psutil ``proc.info`` dict, using safe defaults for ``None``."""
    mem_info = info.get("memory_info")
    return ProcessInfo(
        pid=info.get("pid", 0),
        name=info.get("name") or "",
        cpu_percent=info.get("cpu_percent") or 0.0,
        memory_kb=(mem_info.rss // 1024) if mem_info else 0,
    )


# ── Provider ───────────────────────────────────────────────────────────────


class PsutilProvider:
    """Snapshot provider backed by psutil.

    Errors raised by psutil or the OS are not caught here; the dashboard
    treats them as fatal.
    """

    def __init__(self) -> None:
        self._cpu_brand = read_cpu_brand()
        # Prime psutil's delta counters (first call returns 0.0)
        psutil.cpu_percent(interval=None, percpu=True)

    def refresh(self) -> Snapshot:
        """Sample the system and return a fresh, self-consistent Snapshot."""
        cores = tuple(psutil.cpu_percent(interval=None, percpu=True))

        ram = psutil.virtual_memory()
        swap = psutil.swap_memory()
        memory_total, memory_used = _clamped_pair(ram.total, ram.used)
        swap_total, swap_used = _clamped_pair(swap.total, swap.used)

        processes: dict[int, ProcessInfo] = {}
        for proc in psutil.process_iter(_PROC_ATTRS):
            row = process_from_info(proc.info)
            processes[row.pid] = row

        return Snapshot(
            cores=cores,
            cpu_brand=self._cpu_brand,
            memory_total_mb=memory_total,
            memory_used_mb=memory_used,
            swap_total_mb=swap_total,
            swap_used_mb=swap_used,
            processes=MappingProxyType(processes),
            host_info=read_host_info(),
        )
