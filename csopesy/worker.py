"""A CPU core that runs the instructions of its assigned process."""

from __future__ import annotations

import threading
import time
from pathlib import Path
from typing import Protocol

from csopesy.config import Config
from csopesy.memory import FlatMemoryAllocator
from csopesy.process import Process, ProcessState

_RR_PAUSE = 0.01


class SchedulerView(Protocol):
    """What a worker needs from the scheduler that owns it."""

    config: Config
    allocator: FlatMemoryAllocator
    snapshot_dir: Path | None

    @property
    def cycles(self) -> int: ...

    @property
    def running_count(self) -> int: ...

    @property
    def ready_count(self) -> int: ...

    def add_process(self, process: Process) -> None: ...

    def increment_working_cores(self) -> None: ...

    def decrement_working_cores(self) -> None: ...


class CPUWorker:
    """One emulated core, paced by the scheduler's cycle counter."""

    def __init__(self, cpu_id: int, scheduler: SchedulerView):
        self.cpu_id = cpu_id
        self.scheduler = scheduler
        self.process: Process | None = None
        self.working = False
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None

    def assign(self, process: Process) -> None:
        process.assigned_cpu_id = self.cpu_id
        self.process = process

    def can_accept(self) -> bool:
        """Whether a new process may be given to this core."""
        process = self.process
        if process is None or process.is_state_finished():
            return True
        return (
            process.state is ProcessState.WAITING
            and self.scheduler.config.scheduler == "rr"
        )

    def start(self) -> None:
        """Run the assigned process on a background thread."""
        if self.process is None:
            raise RuntimeError(f"CPU {self.cpu_id} has no assigned process")
        config = self.scheduler.config
        delay = config.delay_per_exec + 1
        if config.scheduler == "fcfs":
            target, args = self.run_fcfs, (delay,)
        elif config.scheduler == "rr":
            target, args = self.run_rr, (delay, config.quantum_cycles, config.num_cpu)
        else:
            raise ValueError(f"Unknown scheduling algorithm: {config.scheduler}")
        self.working = True
        self.process.set_state(ProcessState.RUNNING)
        self._thread = threading.Thread(target=target, args=args, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self.working = False

    def _wait_for_cycle(self, target: int, pause: float) -> None:
        while self.scheduler.cycles < target:
            time.sleep(pause)

    def _step(self, process: Process) -> None:
        with self._lock:
            process.execute_current_command(self.cpu_id)
            process.move_to_next_line()

    def _snapshot(self, command_counter: int) -> None:
        directory = self.scheduler.snapshot_dir
        if directory is not None:
            self.scheduler.allocator.write_cycle_snapshot(directory, command_counter)

    def run_fcfs(self, delay: int) -> None:
        """Run the process to completion, one instruction every ``delay`` cycles."""
        process = self.process
        if process is None:
            raise RuntimeError(f"CPU {self.cpu_id} has no assigned process")
        scheduler = self.scheduler
        scheduler.increment_working_cores()
        target = scheduler.cycles + delay
        while not process.is_finished():
            self._wait_for_cycle(target, 0)
            self._step(process)
            target += delay
        process.mark_finished()
        scheduler.decrement_working_cores()
        self.stop()

    def run_rr(self, delay: int, quantum: int, total_cpus: int) -> None:
        """Run up to ``quantum`` instructions, then requeue the process if others wait."""
        process = self.process
        if process is None:
            raise RuntimeError(f"CPU {self.cpu_id} has no assigned process")
        scheduler = self.scheduler
        scheduler.increment_working_cores()
        target = scheduler.cycles + delay
        counter = 0
        while not process.is_finished():
            contended = scheduler.running_count + scheduler.ready_count > total_cpus
            if contended and counter == quantum:
                self._snapshot(counter)
                counter = 0
                break
            self._wait_for_cycle(target, _RR_PAUSE)
            self._step(process)
            counter += 1
            target += delay

        if counter:
            self._snapshot(counter)

        if process.is_finished():
            process.mark_finished()
        else:
            process.set_state(ProcessState.WAITING)
            process.assigned_cpu_id = -1
            scheduler.add_process(process)
        self.stop()
        scheduler.decrement_working_cores()