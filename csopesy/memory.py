"""Fixed-partition memory allocation for emulated processes."""

from __future__ import annotations

import abc
import threading
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from csopesy.process import Process, ProcessState

TIMESTAMP_FORMAT = "%m/%d/%Y %I:%M:%S%p"


class MemoryAllocator(abc.ABC):
    """Places processes in memory and removes them again."""

    @abc.abstractmethod
    def allocate(self, process: Process) -> bool:
        """Place ``process`` in memory; return whether it was placed."""

    @abc.abstractmethod
    def deallocate(self, process: Process) -> None:
        """Release the memory held by ``process``."""

    @abc.abstractmethod
    def visualize(self) -> str:
        """Return a text picture of the current memory layout."""


@dataclass
class MemoryPartition:
    """One fixed-size slot of memory."""

    slot: int
    allocatable: bool = True
    process: Process | None = None


class FlatMemoryAllocator(MemoryAllocator):
    """Memory split into equal slots, each holding at most one process."""

    def __init__(
        self,
        max_overall_memory: int,
        memory_per_process: int = 4096,
        slots: int = 4,
    ):
        if slots < 1:
            raise ValueError(f"slots must be at least 1, got {slots}")
        self.max_overall_memory = max_overall_memory
        self.memory_per_process = memory_per_process
        self.partitions = [MemoryPartition(slot) for slot in range(slots)]
        self._lock = threading.RLock()

    def allocate(self, process: Process) -> bool:
        with self._lock:
            if any(p.process is process for p in self.partitions):
                return False
            for partition in self.partitions:
                if partition.allocatable:
                    partition.process = process
                    partition.allocatable = False
                    return True
            return False

    def deallocate(self, process: Process) -> None:
        with self._lock:
            for partition in self.partitions:
                if partition.process is process:
                    partition.process = None
                    partition.allocatable = True

    def is_allocated(self, process: Process) -> bool:
        with self._lock:
            return any(p.process is process for p in self.partitions)

    def set_allocatable(self, slot: int, value: bool) -> None:
        with self._lock:
            self.partitions[slot].allocatable = value

    def allocated_slots(self) -> int:
        with self._lock:
            return sum(1 for p in self.partitions if not p.allocatable)

    def has_free_slots(self) -> bool:
        with self._lock:
            return any(p.allocatable for p in self.partitions)

    def fragmentation(self) -> int:
        """Free memory outside the occupied slots, in KB."""
        with self._lock:
            occupied = sorted(
                (p for p in self.partitions if not p.allocatable and p.process),
                key=lambda p: p.slot,
            )
        size = self.memory_per_process
        fragmentation = 0
        previous_upper = 0
        for partition in occupied:
            lower = partition.slot * size
            if previous_upper < lower:
                fragmentation += lower - previous_upper
            previous_upper = lower + size
        if previous_upper < self.max_overall_memory:
            fragmentation += self.max_overall_memory - previous_upper
        return fragmentation

    def render(self, now: datetime | None = None, mark_waiting: bool = False) -> str:
        """Describe the memory layout from the top address down."""
        now = now or datetime.now()
        with self._lock:
            lines = [
                "",
                f"Timestamp: ({now.strftime(TIMESTAMP_FORMAT)})",
                f"Number of processes in memory: {self.allocated_slots()}",
                f"Total external fragmentation in KB: {self.fragmentation()}",
                f"----end---- = {self.max_overall_memory}",
            ]
            current = self.max_overall_memory
            last = len(self.partitions) - 1
            for index, partition in enumerate(self.partitions):
                if partition.allocatable:
                    lines.append("")
                    current -= self.memory_per_process
                elif partition.process is not None:
                    name = partition.process.name
                    if mark_waiting and partition.process.state is ProcessState.WAITING:
                        name += " *"
                    lines.append(name)
                    current -= self.memory_per_process
                if index < last:
                    lines.append(str(current))
        lines.append("----start---- = 0")
        return "\n".join(lines) + "\n\n"

    def visualize(self) -> str:
        return self.render(mark_waiting=True)

    def write_report(self, path: str | Path) -> Path:
        """Write the memory layout to ``path``, replacing it; return its absolute path."""
        target = Path(path)
        target.write_text(self.render())
        return target.resolve()

    def write_cycle_snapshot(self, directory: str | Path, command_counter: int) -> Path:
        """Write the layout to a new ``memory_stamp_<n>.txt`` file in ``directory``."""
        folder = Path(directory)
        folder.mkdir(parents=True, exist_ok=True)
        text = self.render()
        index = 0
        while True:
            suffix = f" ({index})" if index else ""
            target = folder / f"memory_stamp_{command_counter}{suffix}.txt"
            try:
                with target.open("x") as stamp:
                    stamp.write(text)
            except FileExistsError:
                index += 1
                continue
            return target