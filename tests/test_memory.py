import sys

import pytest

from evento.system import memory

TOTAL = 16000000
FREE = 2000000
AVAILABLE = 8000000
BUFFERS = 1000000
CACHED = 3000000
SWAP_TOTAL = 4000000
SWAP_FREE = 1000000

MEMINFO = (
    f"MemTotal:       {TOTAL} kB\n"
    f"MemFree:         {FREE} kB\n"
    f"MemAvailable:    {AVAILABLE} kB\n"
    f"Buffers:         {BUFFERS} kB\n"
    f"Cached:          {CACHED} kB\n"
    f"SwapTotal:       {SWAP_TOTAL} kB\n"
    f"SwapFree:        {SWAP_FREE} kB\n"
    "HugePages_Total:       0\n"
)


@pytest.fixture
def linux_meminfo(tmp_path, monkeypatch):
    path = tmp_path / "meminfo"
    path.write_text(MEMINFO)
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setattr(memory, "_MEMINFO", str(path))
    return path


def test_parse_meminfo_keys_and_values():
    values = memory.parse_meminfo(MEMINFO)
    assert values["MemTotal"] == TOTAL
    assert values["SwapFree"] == SWAP_FREE
    assert values["HugePages_Total"] == 0
    assert "MemTotal:" not in values


def test_parse_meminfo_skips_malformed_lines():
    values = memory.parse_meminfo("garbage\nMemFree: abc kB\n\nCached: 42 kB\n")
    assert values == {"Cached": 42}


def test_memory_usage_pinned(linux_meminfo):
    assert memory.get_memory_usage() == pytest.approx(62.5)


def test_total_memory_from_meminfo(linux_meminfo):
    assert memory.get_total_memory() == TOTAL * 1024


def test_available_memory_from_meminfo(linux_meminfo):
    assert memory.get_available_memory() == AVAILABLE * 1024
    assert memory.get_available_memory_size() == AVAILABLE * 1024


def test_committed_and_uncommitted_sum_to_total(linux_meminfo):
    committed = memory.get_committed_memory()
    uncommitted = memory.get_uncommitted_memory()
    assert committed + uncommitted == memory.get_total_memory()
    assert uncommitted == memory.get_available_memory()


def test_swap_figures(linux_meminfo):
    assert memory.get_swap_memory_total() == SWAP_TOTAL
    used = memory.get_swap_memory_used()
    assert 0 <= used <= memory.get_swap_memory_total()


def test_virtual_memory_figures(linux_meminfo):
    assert memory.get_virtual_memory_max() == TOTAL + SWAP_TOTAL
    used = memory.get_virtual_memory_used()
    assert 0 < used <= memory.get_virtual_memory_max()


def test_physical_memory_info_capacity(linux_meminfo):
    slot = memory.get_physical_memory_info()
    assert slot.capacity == str(TOTAL)
    assert slot.clock_speed == ""


def test_available_memory_size_missing_entry(tmp_path, monkeypatch):
    path = tmp_path / "meminfo"
    path.write_text(f"MemTotal: {TOTAL} kB\n")
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setattr(memory, "_MEMINFO", str(path))
    with pytest.raises(ValueError):
        memory.get_available_memory_size()


def test_available_memory_size_malformed_entry(tmp_path, monkeypatch):
    path = tmp_path / "meminfo"
    path.write_text("MemAvailable: lots\n")
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setattr(memory, "_MEMINFO", str(path))
    with pytest.raises(ValueError):
        memory.get_available_memory_size()


def test_available_memory_size_unreadable_file(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setattr(memory, "_MEMINFO", str(tmp_path / "missing"))
    with pytest.raises(OSError):
        memory.get_available_memory_size()


def test_unreadable_meminfo_gives_zero(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setattr(memory, "_MEMINFO", str(tmp_path / "missing"))
    assert memory.get_memory_usage() == 0.0
    assert memory.get_total_memory() == 0
    assert memory.get_swap_memory_total() == 0
    assert memory.get_physical_memory_info().capacity == ""


def test_unsupported_platform_gives_zero(monkeypatch):
    monkeypatch.setattr(sys, "platform", "sunos5")
    assert memory.get_total_memory() == 0
    assert memory.get_available_memory() == 0
    assert memory.get_committed_memory() == 0