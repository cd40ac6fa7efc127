# evento

Support code for a desktop client of an event service: helpers for the local
download cache, plus diagnostics that describe the host machine. It uses only
the standard library.

## Modules

- `evento.storage`: the download cache directory.
  - `format_size(size)` formats a byte count as `B`, `KiB`, `MiB` or `GiB`,
    with two decimals above bytes (`format_size(2048) == "2.00KiB"`).
  - `total_cache_size_string(directory)` adds up the sizes of the files
    directly inside a directory and formats the total. It returns `"0B"` when
    `directory` is `None`.
  - `find_cached_file(directory, stem)` returns the absolute path of the first
    file whose stem matches, or `None`.
  - `save_to_disk(data, path)` is a coroutine. It writes bytes or text to a
    file, replacing what was there, and returns whether the write succeeded.
- `evento.system.os_info`: `OperatingSystemInfo` (with `to_json()`),
  `get_operating_system_info()`, `get_computer_name()`,
  `parse_release_file(path)` for os-release style files, and `is_wsl()`.
- `evento.system.cpu`: `CacheSizes`, `get_current_cpu_usage()`,
  `get_current_cpu_temperature()`, `get_cpu_model()`,
  `get_processor_identifier()`, `get_processor_frequency()`,
  `get_number_of_physical_packages()`, `get_number_of_physical_cpus()` and
  `get_cache_sizes()`. The parsers `cpu_usage_from_stat(line)` and
  `cpuinfo_field(text, prefix)` work on `/proc/stat` and `/proc/cpuinfo` text.
- `evento.system.memory`: `MemorySlot`, `MemoryInfo`, `parse_meminfo(text)`
  and getters for memory usage, total and available memory, virtual memory,
  swap, and committed and uncommitted memory.
- `evento.system.wm`: `WindowManagerInfo` and `get_window_manager_info()`.
  These report the desktop environment, window manager, theme, font and cursor.

On Linux the system getters read `/proc` and `/sys`. On macOS and Windows
they call tools such as `sysctl`, `vm_stat`, `wmic`, `wmctrl` and
`gsettings`, and use the Windows registry. A value that cannot be found is
returned as zero or an empty string.
`get_available_memory_size()` is the exception on Linux: it raises `OSError`
when `/proc/meminfo` cannot be read, and `ValueError` when its
`MemAvailable` entry is missing or malformed.

## Example

```python
import asyncio

from evento.storage import find_cached_file, save_to_disk, total_cache_size_string
from evento.system.cpu import get_cpu_model
from evento.system.memory import get_memory_usage
from evento.system.os_info import get_operating_system_info

info = get_operating_system_info()
print(info.to_json())
print(get_cpu_model(), f"{get_memory_usage():.1f}%")

asyncio.run(save_to_disk(b"\x89PNG....", "cache/abc123.png"))
print(find_cached_file("cache", "abc123"))
print(total_cache_size_string("cache"))
```

## What this package does not do

The package has no network code. It does not send HTTP requests or talk to
the event service. It has no types for the service's responses and no
signal handling or crash-report writing. There is no command-line program.

## Installation and tests

```
pip install ".[test]"
pytest
```