import random

import pytest

from csopesy.config import (
    Config,
    ConfigError,
    load_config,
    parse_config,
    random_instruction_count,
)

SAMPLE = """num-cpu 4
scheduler "rr"
quantum-cycles 5
batch-process-freq 1
min-ins 1000
max-ins 2000
delay-per-exec 0
max-overall-mem 16384
mem-per-frame 16
mem-per-proc 4096
"""


def test_parse_all_keys():
    config = parse_config(SAMPLE)
    assert config == Config(
        num_cpu=4,
        scheduler="rr",
        quantum_cycles=5,
        batch_process_freq=1,
        min_ins=1000,
        max_ins=2000,
        delay_per_exec=0,
        max_overall_mem=16384,
        mem_per_frame=16,
        mem_per_proc=4096,
    )


def test_scheduler_without_quotes_is_kept():
    assert parse_config("scheduler fcfs").scheduler == "fcfs"


def test_unknown_keys_and_blank_lines_ignored():
    config = parse_config("\nfoo 12\nnum-cpu 2\n\n")
    assert config.num_cpu == 2
    assert config.min_ins == 0


def test_invalid_number_raises():
    with pytest.raises(ConfigError):
        parse_config("num-cpu many")


def test_negative_number_raises():
    with pytest.raises(ConfigError):
        parse_config("max-ins -3")


def test_missing_value_raises():
    with pytest.raises(ConfigError):
        parse_config("quantum-cycles")


def test_load_config_from_file(tmp_path):
    path = tmp_path / "config.txt"
    path.write_text(SAMPLE)
    assert load_config(path) == parse_config(SAMPLE)


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "absent.txt")


def test_describe_round_trips_scheduling_values():
    config = parse_config(SAMPLE)
    described = parse_config(config.describe())
    assert described.num_cpu == config.num_cpu
    assert described.scheduler == config.scheduler
    assert described.quantum_cycles == config.quantum_cycles
    assert described.max_ins == config.max_ins
    assert config.describe().endswith("delay-per-exec 0\n\n")


def test_random_count_equal_bounds():
    assert random_instruction_count(7, 7) == 7


def test_random_count_within_bounds():
    rng = random.Random(1)
    counts = {random_instruction_count(1, 4, rng) for _ in range(200)}
    assert counts <= {1, 2, 3, 4}
    assert len(counts) > 1


def test_random_count_bad_bounds():
    with pytest.raises(ValueError):
        random_instruction_count(5, 2)