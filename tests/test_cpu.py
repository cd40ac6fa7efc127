import pytest

from evento.system import cpu
from evento.system.cpu import CacheSizes, cpu_usage_from_stat, cpuinfo_field

CPUINFO = (
    "processor\t: 0\n"
    "vendor_id\t: GenuineIntel\n"
    "model name\t: Example CPU @ 3.00GHz\n"
    "cpu MHz\t\t: 2995.123\n"
    "physical id\t: 0\n"
    "\n"
    "processor\t: 1\n"
    "model name\t: Second CPU\n"
)


def test_usage_from_stat_worked_example():
    assert cpu_usage_from_stat("cpu  100 0 100 800 0 0 0 0 0 0") == pytest.approx(20.0)


def test_usage_all_idle_is_zero():
    assert cpu_usage_from_stat("cpu 0 0 0 500 0 0 0") == 0.0


def test_usage_within_bounds():
    value = cpu_usage_from_stat("cpu 4705 356 584 3699 23 23 0 0 0 0")
    assert 0.0 <= value <= 100.0


def test_usage_short_line_raises():
    with pytest.raises(ValueError):
        cpu_usage_from_stat("cpu 1 2")


def test_usage_zero_total_raises():
    with pytest.raises(ValueError):
        cpu_usage_from_stat("cpu 0 0 0 0 0")


def test_usage_non_numeric_raises():
    with pytest.raises(ValueError):
        cpu_usage_from_stat("cpu a b c d e")


def test_cpuinfo_field_model_name():
    assert cpuinfo_field(CPUINFO, "model name") == "Example CPU @ 3.00GHz"


def test_cpuinfo_field_takes_first_match():
    assert cpuinfo_field(CPUINFO, "processor") == "0"


def test_cpuinfo_field_frequency_text():
    assert cpuinfo_field(CPUINFO, "cpu MHz") == "2995.123"


def test_cpuinfo_field_missing_is_none():
    assert cpuinfo_field(CPUINFO, "flags") is None


def test_cpuinfo_field_physical_prefix():
    assert cpuinfo_field(CPUINFO, "physical") == "0"


def test_cache_sizes_defaults_are_zero():
    sizes = CacheSizes()
    assert (sizes.l1d, sizes.l1i, sizes.l2, sizes.l3) == (0, 0, 0, 0)


def test_get_cache_sizes_non_negative():
    sizes = cpu.get_cache_sizes()
    assert min(sizes.l1d, sizes.l1i, sizes.l2, sizes.l3) >= 0


def test_get_current_cpu_usage_in_range():
    assert 0.0 <= cpu.get_current_cpu_usage() <= 100.0


def test_get_processor_frequency_non_negative():
    assert cpu.get_processor_frequency() >= 0.0


def test_get_cpu_model_single_line():
    assert "\n" not in cpu.get_cpu_model()


def test_get_processor_identifier_single_line():
    assert "\n" not in cpu.get_processor_identifier()


def test_counts_non_negative():
    assert cpu.get_number_of_physical_cpus() >= 0
    assert cpu.get_number_of_physical_packages() >= 0


def test_temperature_non_negative():
    assert cpu.get_current_cpu_temperature() >= 0.0