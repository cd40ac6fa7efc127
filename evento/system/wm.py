"""Desktop environment and window manager description."""

from __future__ import annotations

import os
import struct
import subprocess
import sys
from dataclasses import dataclass
from typing import Optional

UNSUPPORTED = "Unsupported Platform"

_THEME_KEY = r"Software\Microsoft\Windows\CurrentVersion\Themes\Personalize"
_METRICS_KEY = r"Control Panel\Desktop\WindowMetrics"
# LOGFONTW: five 32-bit fields and eight bytes precede the 32-character face name.
_LOGFONT_FACE_OFFSET = 28
_LOGFONT_FACE_BYTES = 64


@dataclass
class WindowManagerInfo:
    """Desktop environment, window manager, theme, icons, font and cursor."""

    desktop_environment: str = ""
    window_manager: str = ""
    wm_theme: str = ""
    icons: str = ""
    font: str = ""
    cursor: str = ""


def _command_output(*args: str) -> Optional[str]:
    try:
        completed = subprocess.run(args, capture_output=True, text=True, timeout=10)
    except (OSError, subprocess.SubprocessError):
        return None
    return completed.stdout.strip()


def _linux_window_manager() -> Optional[str]:
    output = _command_output("wmctrl", "-m")
    if output is None:
        return None
    names = []
    for line in output.splitlines():
        if "Name" in line:
            fields = line.split()
            if len(fields) > 1:
                names.append(fields[1])
    return "\n".join(names)


def _gsetting(key: str) -> Optional[str]:
    return _command_output("gsettings", "get", "org.gnome.desktop.interface", key)


def _linux_info() -> WindowManagerInfo:
    wm = _linux_window_manager()
    theme = _gsetting("gtk-theme")
    font = _gsetting("font-name")
    cursor = _gsetting("cursor-theme")
    return WindowManagerInfo(
        desktop_environment=os.environ.get("XDG_CURRENT_DESKTOP", "Unknown"),
        window_manager="Unknown WM" if wm is None else wm,
        wm_theme="Unknown Theme" if theme is None else theme,
        icons="Recycle Bin",
        font="Unknown Font" if font is None else font,
        cursor="Unknown Cursor" if cursor is None else cursor,
    )


def _windows_info() -> WindowManagerInfo:
    import winreg

    try:
        version = sys.getwindowsversion()  # type: ignore[attr-defined]
        composited = (version.major, version.minor) >= (6, 2)
    except AttributeError:
        composited = False

    apps_light = system_light = 1
    try:
        with winreg.OpenKey(winreg.HKEY_CURRENT_USER, _THEME_KEY) as key:
            for name in ("AppsUseLightTheme", "SystemUsesLightTheme"):
                try:
                    value, _ = winreg.QueryValueEx(key, name)
                except OSError:
                    continue
                if name == "AppsUseLightTheme":
                    apps_light = value
                else:
                    system_light = value
    except OSError:
        pass

    def mode(light: int) -> str:
        return "Light" if light else "Dark"

    font = ""
    try:
        with winreg.OpenKey(winreg.HKEY_CURRENT_USER, _METRICS_KEY) as key:
            raw, _ = winreg.QueryValueEx(key, "MessageFont")
        (height,) = struct.unpack_from("<i", raw, 0)
        face_raw = raw[_LOGFONT_FACE_OFFSET:_LOGFONT_FACE_OFFSET + _LOGFONT_FACE_BYTES]
        face = face_raw.decode("utf-16-le", errors="replace").split("\x00", 1)[0]
        font = f"{face} ({height}pt)"
    except (OSError, struct.error, TypeError):
        font = " (0pt)"

    return WindowManagerInfo(
        desktop_environment="Fluent",
        window_manager="Desktop Window Manager (DWM)" if composited else "Unknown WM",
        wm_theme=f"Oem - Blue (System: {mode(system_light)}, Apps: {mode(apps_light)})",
        icons="Recycle Bin",
        font=font,
        cursor="Windows Default (32px)",
    )


def get_window_manager_info() -> WindowManagerInfo:
    """Describe the desktop environment and window manager in use."""
    if sys.platform == "win32":
        return _windows_info()
    if sys.platform.startswith("linux"):
        return _linux_info()
    return WindowManagerInfo(
        desktop_environment=UNSUPPORTED,
        window_manager=UNSUPPORTED,
        wm_theme=UNSUPPORTED,
        icons=UNSUPPORTED,
        font=UNSUPPORTED,
        cursor=UNSUPPORTED,
    )