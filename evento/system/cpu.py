"""Processor information: usage, temperature, model, frequency and caches."""

from __future__ import annotations

import logging
import os
import re
import subprocess
import sys
from dataclasses import dataclass
from typing import Optional

from .os_info import is_wsl

logger = logging.getLogger(__name__)

_PROC_STAT = "/proc/stat"
_PROC_CPUINFO = "/proc/cpuinfo"
_THERMAL_ZONE = "/sys/class/thermal/thermal_zone0/temp"
_LINUX_CACHE_FILES = (
    ("l1i", "/sys/devices/system/cpu/cpu0/cache/index1/size"),
    ("l2", "/sys/devices/system/cpu/cpu0/cache/index2/size"),
    ("l3", "/sys/devices/system/cpu/cpu0/cache/index3/size"),
)
_MAC_CACHE_KEYS = (
    ("l1i", "machdep.cpu.cache.l1i.size"),
    ("l1d", "machdep.cpu.cache.l1d.size"),
    ("l2", "machdep.cpu.cache.l2.size"),
    ("l3", "machdep.cpu.cache.l3.size"),
)
_WINDOWS_CPU_KEY = r"HARDWARE\DESCRIPTION\System\CentralProcessor\0"
_LEADING_DIGITS = re.compile(r"\s*(\d+)")


@dataclass
class CacheSizes:
    """Sizes of the processor caches in KB."""

    l1d: int = 0
    l1i: int = 0
    l2: int = 0
    l3: int = 0


def _is_linux() -> bool:
    return sys.platform.startswith("linux")


def _run(*args: str) -> Optional[str]:
    """Return the first output line of a command, or None when it fails."""
    try:
        completed = subprocess.run(args, capture_output=True, text=True, check=True, timeout=10)
    except (OSError, subprocess.SubprocessError):
        return None
    lines = completed.stdout.splitlines()
    return lines[0] if lines else None


def _read_text(path: str) -> Optional[str]:
    try:
        with open(path, encoding="utf-8", errors="replace") as handle:
            return handle.read()
    except OSError:
        return None


def _windows_cpu_value(name: str):
    try:
        import winreg
    except ImportError:
        return None
    try:
        with winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, _WINDOWS_CPU_KEY) as key:
            value, _ = winreg.QueryValueEx(key, name)
    except OSError:
        return None
    return value


def _leading_int(text: str) -> Optional[int]:
    match = _LEADING_DIGITS.match(text)
    return int(match.group(1)) if match else None


def cpu_usage_from_stat(line: str) -> float:
    """Compute the busy percentage from the aggregate ``cpu`` line of /proc/stat.

    Raises ValueError when the line has too few counters or no time at all.
    """
    tokens = line.split()
    if len(tokens) < 5:
        raise ValueError(f"malformed stat line: {line!r}")
    counters = [int(token) for token in tokens[1:]]
    total = sum(counters)
    if total == 0:
        raise ValueError("stat line reports no elapsed time")
    idle = counters[3]
    return (total - idle) / total * 100.0


def cpuinfo_field(text: str, prefix: str) -> Optional[str]:
    """Return the value of the first cpuinfo line starting with ``prefix``."""
    for line in text.splitlines():
        if line.startswith(prefix):
            _, sep, value = line.partition(":")
            return value[1:] if sep else ""
    return None


def _cpuinfo(prefix: str) -> Optional[str]:
    text = _read_text(_PROC_CPUINFO)
    return None if text is None else cpuinfo_field(text, prefix)


def get_current_cpu_usage() -> float:
    """Return the processor usage in percent, 0.0 when unknown."""
    if _is_linux():
        text = _read_text(_PROC_STAT)
        if text is None:
            logger.error("GetCpuUsage error: open /proc/stat error")
            return 0.0
        try:
            return cpu_usage_from_stat(text.splitlines()[0] if text else "")
        except ValueError as exc:
            logger.error("GetCpuUsage error: %s", exc)
            return 0.0
    if sys.platform == "darwin":
        try:
            completed = subprocess.run(("top", "-l", "1", "-n", "0"), capture_output=True,
                                       text=True, check=True, timeout=10)
        except (OSError, subprocess.SubprocessError):
            logger.error("GetCpuUsage error: top failed")
            return 0.0
        match = re.search(r"CPU usage:\s*([\d.]+)% user,\s*([\d.]+)% sys", completed.stdout)
        if match is None:
            logger.error("GetCpuUsage error: unexpected top output")
            return 0.0
        return float(match.group(1)) + float(match.group(2))
    if sys.platform == "win32":
        try:
            completed = subprocess.run(("wmic", "cpu", "get", "loadpercentage"),
                                       capture_output=True, text=True, check=True, timeout=10)
        except (OSError, subprocess.SubprocessError):
            return 0.0
        values = [int(token) for token in completed.stdout.split() if token.isdigit()]
        return sum(values) / len(values) if values else 0.0
    return 0.0


def get_current_cpu_temperature() -> float:
    """Return the processor temperature in degrees Celsius, 0.0 when unknown."""
    if sys.platform == "win32":
        value = _windows_cpu_value("~MHz")
        return float(value) / 10.0 if isinstance(value, int) else 0.0
    if sys.platform == "darwin":
        line = _run("sysctl", "-n", "machdep.xcpm.cpu_thermal_level")
        if line is None:
            logger.error("GetCpuTemperature error: popen error")
            return 0.0
        try:
            return float(line.strip())
        except ValueError as exc:
            logger.error("GetCpuTemperature error: %s", exc)
            return 0.0
    if _is_linux():
        if is_wsl():
            logger.warning("GetCpuTemperature error: WSL not supported")
            return 0.0
        text = _read_text(_THERMAL_ZONE)
        if text is None:
            logger.error("GetCpuTemperature error: open %s error", _THERMAL_ZONE)
            return 0.0
        try:
            return int(text.split()[0]) / 1000.0
        except (IndexError, ValueError):
            return 0.0
    return 0.0


def get_cpu_model() -> str:
    """Return the processor model name, or an empty string."""
    if sys.platform == "win32":
        value = _windows_cpu_value("ProcessorNameString")
        return value if isinstance(value, str) else ""
    if _is_linux():
        return _cpuinfo("model name") or ""
    if sys.platform == "darwin":
        line = _run("sysctl", "-n", "machdep.cpu.brand_string")
        if line is None:
            logger.error("GetCPUModel error: popen error")
            return ""
        return line
    return ""


def get_processor_identifier() -> str:
    """Return the processor identifier, or an empty string."""
    if sys.platform == "win32":
        value = _windows_cpu_value("Identifier")
        return value if isinstance(value, str) else ""
    if _is_linux():
        return _cpuinfo("processor") or ""
    if sys.platform == "darwin":
        line = _run("sysctl", "-n", "machdep.cpu.brand_string")
        if line is None:
            logger.error("GetProcessorIdentifier error: popen error")
            return ""
        return line
    return ""


def get_processor_frequency() -> float:
    """Return the processor frequency in GHz, 0.0 when unknown."""
    if sys.platform == "win32":
        value = _windows_cpu_value("~MHz")
        return value / 1000.0 if isinstance(value, int) else 0.0
    if _is_linux():
        field = _cpuinfo("cpu MHz")
        try:
            return float(field) / 1000.0 if field else 0.0
        except ValueError:
            return 0.0
    if sys.platform == "darwin":
        line = _run("sysctl", "-n", "hw.cpufrequency")
        if line is None:
            logger.error("GetProcessorFrequency error: popen error")
            return 0.0
        try:
            return float(line) / 1e9
        except ValueError:
            return 0.0
    return 0.0


def get_number_of_physical_packages() -> int:
    """Return the number reported for physical processor packages."""
    if sys.platform == "win32":
        return os.cpu_count() or 0
    if sys.platform == "darwin":
        line = _run("sysctl", "-n", "hw.packages")
        if line is None:
            logger.error("GetNumberOfPhysicalPackages error: popen error")
            return 0
        return _leading_int(line) or 0
    if _is_linux():
        try:
            return int(os.sysconf("SC_PHYS_PAGES"))
        except (ValueError, OSError, AttributeError):
            return 0
    return 0


def get_number_of_physical_cpus() -> int:
    """Return the number reported for physical processors."""
    if sys.platform == "win32":
        return os.cpu_count() or 0
    if sys.platform == "darwin":
        line = _run("sysctl", "-n", "hw.physicalcpu")
        if line is None:
            logger.error("GetNumberOfPhysicalCPUs error: popen error")
            return 0
        return _leading_int(line) or 0
    if _is_linux():
        field = _cpuinfo("physical")
        return (_leading_int(field) or 0) if field else 0
    return 0


def get_cache_sizes() -> CacheSizes:
    """Return the processor cache sizes in KB; unknown sizes are 0."""
    sizes = CacheSizes()
    if _is_linux():
        for name, path in _LINUX_CACHE_FILES:
            text = _read_text(path)
            if text is None:
                continue
            value = _leading_int(text)
            if value is not None:
                setattr(sizes, name, value)
    elif sys.platform == "darwin":
        for name, key in _MAC_CACHE_KEYS:
            line = _run("sysctl", "-n", key)
            value = _leading_int(line) if line else None
            if value is not None:
                setattr(sizes, name, value // 1024)
    elif sys.platform == "win32":
        try:
            completed = subprocess.run(("wmic", "cpu", "get", "L2CacheSize,L3CacheSize"),
                                       capture_output=True, text=True, check=True, timeout=10)
        except (OSError, subprocess.SubprocessError):
            return sizes
        numbers = [int(token) for token in completed.stdout.split() if token.isdigit()]
        if len(numbers) >= 2:
            sizes.l2, sizes.l3 = numbers[0], numbers[1]
    return sizes