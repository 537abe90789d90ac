"""An emulated process: a list of commands and an instruction pointer."""

from __future__ import annotations

import enum
import threading
import time

from csopesy.commands import Command, PrintCommand


class ProcessState(enum.Enum):
    WAITING = "WAITING"
    READY = "READY"
    RUNNING = "RUNNING"
    FINISHED = "FINISHED"


class Process:
    """A process with its commands, state and scheduling details."""

    def __init__(
        self,
        pid: int,
        name: str,
        memory_frame_size: int = 0,
        memory_size: int = 0,
        instruction_count: int = 0,
    ):
        self.pid = pid
        self.name = name
        self.memory_frame_size = memory_frame_size
        self.memory_size = memory_size
        self.commands: list[Command] = [
            PrintCommand(f"Hello world from {name}!") for _ in range(instruction_count)
        ]
        self.current_line = 0
        self.state = ProcessState.READY
        self.assigned_cpu_id = -1
        self.start_time = time.time()
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"Process(pid={self.pid}, name={self.name!r}, state={self.state.name})"

    def add_command(self, command: Command) -> None:
        self.commands.append(command)

    @property
    def lines_of_code(self) -> int:
        return len(self.commands)

    def set_state(self, state: ProcessState | str) -> None:
        """Set the state from a ``ProcessState`` or its name."""
        if isinstance(state, str):
            try:
                state = ProcessState[state]
            except KeyError:
                raise ValueError(f"Invalid process state: {state}") from None
        with self._lock:
            self.state = state

    def execute_current_command(self, cpu_id: int) -> None:
        with self._lock:
            line = self.current_line
        if line >= len(self.commands):
            raise IndexError("current instruction line exceeds the command list")
        self.commands[line].execute(cpu_id, self.name)

    def move_to_next_line(self) -> None:
        with self._lock:
            if self.current_line < len(self.commands):
                self.current_line += 1

    def is_finished(self) -> bool:
        return self.current_line == len(self.commands)

    def is_state_finished(self) -> bool:
        return self.state is ProcessState.FINISHED

    def mark_finished(self, when: float | None = None) -> None:
        """Record the finish time and move to the finished state."""
        self.start_time = time.time() if when is None else when
        self.set_state(ProcessState.FINISHED)