"""Reading the emulator's ``config.txt`` settings."""

from __future__ import annotations

import random
from dataclasses import dataclass
from pathlib import Path

_INT_KEYS = {
    "num-cpu": "num_cpu",
    "quantum-cycles": "quantum_cycles",
    "batch-process-freq": "batch_process_freq",
    "min-ins": "min_ins",
    "max-ins": "max_ins",
    "delay-per-exec": "delay_per_exec",
    "max-overall-mem": "max_overall_mem",
    "mem-per-frame": "mem_per_frame",
    "mem-per-proc": "mem_per_proc",
}


class ConfigError(Exception):
    """Raised when a configuration file cannot be read or holds a bad value."""


@dataclass(frozen=True)
class Config:
    """Settings that drive the scheduler and memory allocator."""

    num_cpu: int = 0
    scheduler: str = ""
    quantum_cycles: int = 0
    batch_process_freq: int = 0
    min_ins: int = 0
    max_ins: int = 0
    delay_per_exec: int = 0
    max_overall_mem: int = 0
    mem_per_frame: int = 0
    mem_per_proc: int = 0

    def describe(self) -> str:
        """Return the scheduling parameters in config-file syntax."""
        return (
            f"num-cpu {self.num_cpu}\n"
            f'scheduler "{self.scheduler}"\n'
            f"quantum-cycles {self.quantum_cycles}\n"
            f"batch-process-freq {self.batch_process_freq}\n"
            f"min-ins {self.min_ins}\n"
            f"max-ins {self.max_ins}\n"
            f"delay-per-exec {self.delay_per_exec}\n\n"
        )


def _parse_unsigned(key: str, token: str | None) -> int:
    if token is None:
        raise ConfigError(f"Missing value for {key}")
    try:
        value = int(token)
    except ValueError:
        raise ConfigError(f"Invalid value for {key}: {token!r}") from None
    if value < 0:
        raise ConfigError(f"Value for {key} must not be negative: {value}")
    return value


def parse_config(text: str) -> Config:
    """Parse the text of a config file; unknown keys are ignored."""
    values: dict[str, object] = {}
    for line in text.splitlines():
        tokens = line.split()
        if not tokens:
            continue
        key, rest = tokens[0], tokens[1:]
        token = rest[0] if rest else None
        if key == "scheduler":
            if token is None:
                raise ConfigError("Missing value for scheduler")
            if len(token) >= 2 and token.startswith('"') and token.endswith('"'):
                token = token[1:-1]
            values["scheduler"] = token
        elif key in _INT_KEYS:
            values[_INT_KEYS[key]] = _parse_unsigned(key, token)
    return Config(**values)


def load_config(path: str | Path) -> Config:
    """Read and parse the config file at ``path``."""
    try:
        text = Path(path).read_text()
    except OSError as exc:
        raise ConfigError(f"Unable to open config file: {path}") from exc
    return parse_config(text)


def random_instruction_count(
    min_ins: int, max_ins: int, rng: random.Random | None = None
) -> int:
    """Pick a number of instructions uniformly in ``[min_ins, max_ins]``."""
    if min_ins == max_ins:
        return min_ins
    if min_ins > max_ins:
        raise ValueError(f"min-ins {min_ins} is greater than max-ins {max_ins}")
    return (rng or random).randint(min_ins, max_ins)