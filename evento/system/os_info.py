"""Operating system identification."""

from __future__ import annotations

import json
import logging
import os
import platform
import socket
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

_ARCHITECTURES = {
    "x86": "x86",
    "i386": "x86",
    "i486": "x86",
    "i586": "x86",
    "i686": "x86",
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "aarch64": "ARM64",
    "arm64": "ARM64",
}


@dataclass
class OperatingSystemInfo:
    """Names and versions describing the running system."""

    os_name: str = ""
    os_version: str = ""
    kernel_version: str = ""
    architecture: str = ""
    compiler: str = ""
    computer_name: str = ""

    def to_json(self) -> str:
        """Return name, version, kernel version and architecture as a JSON text."""
        document = {
            "osName": self.os_name,
            "osVersion": self.os_version,
            "kernelVersion": self.kernel_version,
            "architecture": self.architecture,
        }
        return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


def get_computer_name() -> Optional[str]:
    """Return the host name, or None when it cannot be determined."""
    try:
        name = socket.gethostname()
    except OSError:
        return None
    return name or None


def parse_release_file(path: Union[str, Path]) -> tuple[str, str]:
    """Read PRETTY_NAME and VERSION from an os-release style file.

    Returns a pair of empty strings when the file cannot be read.
    """
    try:
        with open(path, encoding="utf-8", errors="replace") as handle:
            lines = handle.read().splitlines()
    except OSError:
        logger.error("Cannot open file: %s", path)
        return "", ""

    name = version = ""
    for line in lines:
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
            value = value[1:-1]
        if key == "PRETTY_NAME":
            name = value
        elif key == "VERSION":
            version = value
    return name, version


def _first_line(path: str) -> Optional[str]:
    try:
        with open(path, encoding="utf-8", errors="replace") as handle:
            return handle.readline().rstrip("\r\n")
    except OSError:
        return None


def _architecture_name(machine: str) -> str:
    lowered = machine.lower()
    if lowered in _ARCHITECTURES:
        return _ARCHITECTURES[lowered]
    if lowered.startswith("arm"):
        return "ARM"
    return "Unknown architecture"


def _linux_info(info: OperatingSystemInfo) -> None:
    name, version = parse_release_file("/etc/os-release")
    if not name:
        name, version = parse_release_file("/etc/lsb-release")
    if name:
        info.os_name, info.os_version = name, version
    else:
        redhat = _first_line("/etc/redhat-release")
        if redhat is not None:
            info.os_name = redhat

    if not info.os_name:
        logger.error("Failed to get OS name")

    kernel_line = _first_line("/proc/version")
    if kernel_line is None:
        logger.error("Failed to open /proc/version")
    else:
        info.kernel_version = kernel_line.split(" ", 1)[0]


def get_operating_system_info() -> OperatingSystemInfo:
    """Collect the operating system information of the running machine."""
    info = OperatingSystemInfo()

    if sys.platform == "win32":
        try:
            winver = sys.getwindowsversion()  # type: ignore[attr-defined]
        except AttributeError:
            logger.error("Failed to get OS version")
        else:
            info.os_name = "Windows"
            info.os_version = f"{winver.major}.{winver.minor} (Build {winver.build})"
    elif sys.platform.startswith("linux"):
        _linux_info(info)
    elif sys.platform == "darwin":
        uname = os.uname()
        info.os_name = uname.sysname
        info.os_version = uname.release
        info.kernel_version = uname.version

    info.architecture = _architecture_name(platform.machine())
    info.compiler = platform.python_compiler() or "Unknown compiler"
    info.computer_name = get_computer_name() or "Unknown computer name"
    return info


def _has_wsl_marker(line: str) -> bool:
    return "microsoft" in line or "WSL" in line


def is_wsl() -> bool:
    """Tell whether the system runs under the Windows Subsystem for Linux."""
    line = _first_line("/proc/version")
    return line is not None and _has_wsl_marker(line)