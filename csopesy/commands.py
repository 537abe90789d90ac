"""Instructions that an emulated process executes."""

from __future__ import annotations

import abc
import enum
from datetime import datetime
from pathlib import Path

LOG_TIME_FORMAT = "(%m/%d/%Y %I:%M:%S%p)"


class CommandType(enum.Enum):
    UNDEFINED = enum.auto()
    PRINT = enum.auto()
    IO = enum.auto()


class Command(abc.ABC):
    """A single instruction of a process."""

    command_type: CommandType = CommandType.UNDEFINED

    @abc.abstractmethod
    def execute(self, cpu_id: int, process_name: str) -> None:
        """Run the instruction on the given core."""


def format_log_entry(timestamp: datetime, cpu_id: int, message: str) -> str:
    """Format one line of a process print log."""
    return f'{timestamp.strftime(LOG_TIME_FORMAT)} Core:{cpu_id} "{message}"'


class PrintCommand(Command):
    """Print a message; logs to ``<log_dir>/<process>.txt`` when a directory is given."""

    command_type = CommandType.PRINT

    def __init__(self, message: str = "Hello world!", log_dir: str | Path | None = None):
        self.message = message
        self.log_dir = Path(log_dir) if log_dir is not None else None

    def execute(self, cpu_id: int, process_name: str) -> None:
        if self.log_dir is None:
            return
        path = self.log_dir / f"{process_name}.txt"
        entry = format_log_entry(datetime.now(), cpu_id, self.message)
        with path.open("a") as log:
            if log.tell() == 0:
                log.write(f"Process name: {process_name}\nLogs:\n\n")
            log.write(entry + "\n")