"""Physical, virtual and swap memory figures."""

from __future__ import annotations

import logging
import os
import re
import shutil
import subprocess
import sys
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger(__name__)

_MEMINFO = "/proc/meminfo"
_MB = 1024 * 1024
_UNIT_FACTORS = {"": 1, "K": 1024, "M": 1024 ** 2, "G": 1024 ** 3, "T": 1024 ** 4}
_MEM_AVAILABLE = re.compile(r"MemAvailable:\s*(\d+)")
_PAGES_FREE = re.compile(r"Pages free:\s*(\d+)")


@dataclass
class MemorySlot:
    """One physical memory module; capacity is reported as text."""

    capacity: str = ""
    clock_speed: str = ""
    type: str = ""


@dataclass
class MemoryInfo:
    """Memory modules together with virtual and swap memory totals."""

    slots: list[MemorySlot] = field(default_factory=list)
    virtual_memory_max: int = 0
    virtual_memory_used: int = 0
    swap_memory_total: int = 0
    swap_memory_used: int = 0


def _is_linux() -> bool:
    return sys.platform.startswith("linux")


def parse_meminfo(text: str) -> dict[str, int]:
    """Map each /proc/meminfo entry name (without colon) to its numeric value."""
    values: dict[str, int] = {}
    for line in text.splitlines():
        parts = line.split()
        if len(parts) < 2:
            continue
        try:
            value = int(parts[1])
        except ValueError:
            continue
        values[parts[0].rstrip(":")] = value
    return values


def _read_meminfo_text() -> str:
    with open(_MEMINFO, encoding="utf-8", errors="replace") as handle:
        return handle.read()


def _meminfo() -> Optional[dict[str, int]]:
    try:
        return parse_meminfo(_read_meminfo_text())
    except OSError:
        return None


def _run(*args: str) -> Optional[str]:
    try:
        completed = subprocess.run(args, capture_output=True, text=True, check=True, timeout=10)
    except (OSError, subprocess.SubprocessError):
        return None
    return completed.stdout


def _first_int(text: Optional[str]) -> Optional[int]:
    if not text:
        return None
    match = re.search(r"\d+", text)
    return int(match.group(0)) if match else None


def _wmic_os(*fields: str) -> dict[str, int]:
    """Query Win32_OperatingSystem values (in KB) through wmic."""
    output = _run("wmic", "OS", "get", ",".join(fields), "/value")
    values: dict[str, int] = {}
    if output is None:
        return values
    for line in output.splitlines():
        key, sep, value = line.strip().partition("=")
        if sep and value.strip().isdigit():
            values[key] = int(value.strip())
    return values


def _mac_memsize() -> Optional[int]:
    return _first_int(_run("sysctl", "-n", "hw.memsize"))


def _mac_free_bytes() -> Optional[int]:
    output = _run("vm_stat")
    if output is None:
        return None
    match = _PAGES_FREE.search(output)
    if match is None:
        return None
    return int(match.group(1)) * os.sysconf("SC_PAGE_SIZE")


def _mac_swapusage(name: str) -> Optional[int]:
    """Return a field of ``vm.swapusage`` in bytes."""
    output = _run("sysctl", "-n", "vm.swapusage")
    if output is None:
        return None
    match = re.search(rf"{name}\s*=\s*([\d.]+)([KMGT]?)", output)
    if match is None:
        return None
    return int(float(match.group(1)) * _UNIT_FACTORS[match.group(2)])


def get_memory_usage() -> float:
    """Return the memory usage in percent, 0.0 when unknown."""
    if _is_linux():
        info = _meminfo()
        if info is None:
            logger.error("GetMemoryUsage error: open %s error", _MEMINFO)
            return 0.0
        total = info.get("MemTotal", 0)
        if total == 0:
            return 0.0
        used = (total - info.get("MemFree", 0) - info.get("Buffers", 0)
                - info.get("Cached", 0))
        return used / total * 100.0
    if sys.platform == "darwin":
        usage = shutil.disk_usage("/")
        return usage.used / usage.total * 100.0 if usage.total else 0.0
    if sys.platform == "win32":
        values = _wmic_os("TotalVisibleMemorySize", "FreePhysicalMemory")
        total = values.get("TotalVisibleMemorySize", 0) // 1024
        available = values.get("FreePhysicalMemory", 0) // 1024
        if total == 0:
            logger.error("GetMemoryUsage error: wmic error")
            return 0.0
        return (total - available) / total * 100.0
    return 0.0


def get_total_memory_size() -> int:
    """Return the physical memory size in bytes."""
    if sys.platform == "win32":
        return _wmic_os("TotalVisibleMemorySize").get("TotalVisibleMemorySize", 0) * 1024
    if sys.platform == "darwin":
        size = _mac_memsize()
        if size is None:
            logger.error("GetTotalMemorySize error: popen error")
            return 0
        return size
    if _is_linux():
        try:
            return int(os.sysconf("SC_PHYS_PAGES")) * int(os.sysconf("SC_PAGE_SIZE"))
        except (ValueError, OSError):
            return 0
    return 0


def get_available_memory_size() -> int:
    """Return the available memory in bytes.

    On Linux, raises OSError when /proc/meminfo cannot be read and ValueError
    when its MemAvailable entry is missing or malformed.
    """
    if sys.platform == "win32":
        return _wmic_os("FreePhysicalMemory").get("FreePhysicalMemory", 0) * 1024
    if sys.platform == "darwin":
        free = _mac_free_bytes()
        if free is None:
            logger.error("GetAvailableMemorySize error: popen error")
            return 0
        return free
    if _is_linux():
        try:
            text = _read_meminfo_text()
        except OSError:
            logger.error("GetAvailableMemorySize error: open %s error", _MEMINFO)
            raise
        for line in text.splitlines():
            if line.startswith("MemAvailable:"):
                match = _MEM_AVAILABLE.match(line)
                if match is None:
                    logger.error("GetAvailableMemorySize error: parse error")
                    raise ValueError(f"cannot parse MemAvailable line: {line!r}")
                return int(match.group(1)) * 1024
        logger.error("GetAvailableMemorySize error: MemAvailable entry not found in %s",
                     _MEMINFO)
        raise ValueError(f"MemAvailable entry not found in {_MEMINFO}")
    return 0


def get_physical_memory_info() -> MemorySlot:
    """Return a memory slot whose capacity is the total physical memory."""
    slot = MemorySlot()
    if sys.platform == "win32":
        total_kb = _wmic_os("TotalVisibleMemorySize").get("TotalVisibleMemorySize", 0)
        slot.capacity = str(total_kb // 1024)
    elif sys.platform == "darwin":
        size = _mac_memsize()
        if size is None:
            logger.error("GetPhysicalMemoryInfo error: popen error")
        else:
            slot.capacity = str(size // _MB)
    elif _is_linux():
        try:
            text = _read_meminfo_text()
        except OSError:
            return slot
        for line in text.splitlines():
            if line.startswith("MemTotal: "):
                slot.capacity = line.split()[1]
                break
    return slot


def _linux_values(*names: str) -> list[int]:
    info = _meminfo() or {}
    return [info.get(name, 0) for name in names]


def get_virtual_memory_max() -> int:
    """Return the size of RAM plus swap."""
    if sys.platform == "win32":
        return _wmic_os("TotalVirtualMemorySize").get("TotalVirtualMemorySize", 0) // 1024
    if sys.platform == "darwin":
        total = _mac_swapusage("total")
        if total is None:
            logger.error("GetVirtualMemoryMax error: popen error")
            return 0
        return total // _MB
    if _is_linux():
        ram, swap = _linux_values("MemTotal", "SwapTotal")
        return ram + swap
    return 0


def get_virtual_memory_used() -> int:
    """Return the used part of RAM plus swap."""
    if sys.platform == "win32":
        values = _wmic_os("TotalVirtualMemorySize", "FreeVirtualMemory")
        return (values.get("TotalVirtualMemorySize", 0)
                - values.get("FreeVirtualMemory", 0)) // 1024
    if sys.platform == "darwin":
        used = _mac_swapusage("used")
        if used is None:
            logger.error("GetVirtualMemoryUsed error: popen error")
            return 0
        return used // _MB
    if _is_linux():
        ram, ram_free, swap, swap_free = _linux_values("MemTotal", "MemFree",
                                                       "SwapTotal", "SwapFree")
        return ram - ram_free + swap - swap_free
    return 0


def get_swap_memory_total() -> int:
    """Return the swap size."""
    if sys.platform == "win32":
        return _wmic_os("SizeStoredInPagingFiles").get("SizeStoredInPagingFiles", 0) // 1024
    if sys.platform == "darwin":
        total = _mac_swapusage("total")
        if total is None:
            logger.error("GetSwapMemoryTotal error: popen error")
            return 0
        return total // _MB
    if _is_linux():
        (swap,) = _linux_values("SwapTotal")
        return swap
    return 0


def get_swap_memory_used() -> int:
    """Return the used part of swap."""
    if sys.platform == "win32":
        values = _wmic_os("SizeStoredInPagingFiles", "FreeSpaceInPagingFiles")
        return (values.get("SizeStoredInPagingFiles", 0)
                - values.get("FreeSpaceInPagingFiles", 0)) // 1024
    if sys.platform == "darwin":
        used = _mac_swapusage("used")
        if used is None:
            logger.error("GetSwapMemoryUsed error: popen error")
            return 0
        return used // _MB
    if _is_linux():
        swap, swap_free = _linux_values("SwapTotal", "SwapFree")
        return swap - swap_free
    return 0


def get_total_memory() -> int:
    """Return the total physical memory in bytes, 0 when unknown."""
    if sys.platform == "win32":
        return _wmic_os("TotalVisibleMemorySize").get("TotalVisibleMemorySize", 0) * 1024
    if _is_linux():
        (total,) = _linux_values("MemTotal")
        return total * 1024
    if sys.platform == "darwin":
        return _mac_memsize() or 0
    return 0


def get_available_memory() -> int:
    """Return the available physical memory in bytes, 0 when unknown."""
    if sys.platform == "win32":
        return _wmic_os("FreePhysicalMemory").get("FreePhysicalMemory", 0) * 1024
    if _is_linux():
        (available,) = _linux_values("MemAvailable")
        return available * 1024
    if sys.platform == "darwin":
        return _mac_free_bytes() or 0
    return 0


def get_committed_memory() -> int:
    """Return the physical memory in use, in bytes."""
    return get_total_memory() - get_available_memory()


def get_uncommitted_memory() -> int:
    """Return the physical memory not in use, in bytes."""
    return get_total_memory() - get_committed_memory()