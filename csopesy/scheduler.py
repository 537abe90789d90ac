"""The CPU scheduler: a cycle clock, a ready queue and a set of cores."""

from __future__ import annotations

import random
import threading
import time
from collections import deque
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from csopesy.config import Config
from csopesy.memory import FlatMemoryAllocator
from csopesy.process import Process, ProcessState
from csopesy.worker import CPUWorker

TIMESTAMP_FORMAT = "%m/%d/%Y %I:%M:%S%p"
_SEPARATOR = "--------------------------\n"
_BATCH_PAUSE = 0.001


def _timestamp(when: float) -> str:
    return datetime.fromtimestamp(when).strftime(TIMESTAMP_FORMAT)


class Scheduler:
    """Drives the cores one cycle at a time and feeds them from the ready queue.

    ``process_factory`` is called with no arguments to create (and register)
    each process produced by the batch generator.
    """

    def __init__(
        self,
        config: Config,
        allocator: FlatMemoryAllocator,
        process_factory: Callable[[], Process],
    ):
        self.config = config
        self.allocator = allocator
        self.process_factory = process_factory
        self.snapshot_dir: Path | None = None
        self.tick_interval = 0.0
        self.workers = [CPUWorker(cpu_id, self) for cpu_id in range(config.num_cpu)]
        self._rng = random.Random()
        self._lock = threading.RLock()
        self._cycles = 0
        self._working_cores = 0
        self._ready: deque[Process] = deque()
        self._running: list[Process] = []
        self._finished: list[Process] = []
        self._last_batch_cycle = 0
        self._loop_stop = threading.Event()
        self._loop_thread: threading.Thread | None = None
        self._batch_stop = threading.Event()
        self._batch_thread: threading.Thread | None = None

    # --- state seen by the workers -------------------------------------

    @property
    def cycles(self) -> int:
        return self._cycles

    @property
    def running_count(self) -> int:
        with self._lock:
            return len(self._running)

    @property
    def ready_count(self) -> int:
        with self._lock:
            return len(self._ready)

    @property
    def working_cores(self) -> int:
        return self._working_cores

    @property
    def ready_processes(self) -> list[Process]:
        with self._lock:
            return list(self._ready)

    @property
    def running_processes(self) -> list[Process]:
        with self._lock:
            return list(self._running)

    @property
    def finished_processes(self) -> list[Process]:
        with self._lock:
            return list(self._finished)

    @property
    def batching(self) -> bool:
        return self._batch_thread is not None and not self._batch_stop.is_set()

    def add_process(self, process: Process) -> None:
        with self._lock:
            self._ready.append(process)

    def increment_working_cores(self) -> None:
        with self._lock:
            self._working_cores += 1

    def decrement_working_cores(self) -> None:
        with self._lock:
            self._working_cores -= 1

    # --- the scheduling loop -------------------------------------------

    def tick(self) -> None:
        """Advance the clock one cycle and hand ready processes to idle cores."""
        with self._lock:
            self._cycles += 1
        available = [w for w in self.workers if not w.working and w.can_accept()]
        self._rng.shuffle(available)

        with self._lock:
            has_ready = bool(self._ready)
        if has_ready and available:
            for worker in available:
                with self._lock:
                    process = self._ready.popleft() if self._ready else None
                if process is None:
                    continue
                allocator = self.allocator
                if not (allocator.has_free_slots() or allocator.is_allocated(process)):
                    self.add_process(process)
                    continue
                if process.state is ProcessState.READY:
                    allocator.allocate(process)
                    worker.assign(process)
                    with self._lock:
                        self._running.append(process)
                    worker.start()
                elif process.state is ProcessState.WAITING:
                    # Preempted processes are already on the running list.
                    worker.assign(process)
                    worker.start()
        self.update_finished()

    def update_finished(self) -> None:
        """Move finished processes off the running list and free their memory."""
        with self._lock:
            still_running = []
            for process in self._running:
                if process.state is ProcessState.FINISHED:
                    self.allocator.deallocate(process)
                    self._finished.append(process)
                else:
                    still_running.append(process)
            self._running = still_running

    def _loop(self) -> None:
        while not self._loop_stop.is_set():
            self.tick()
            time.sleep(self.tick_interval)

    def start(self) -> bool:
        """Start the cycle clock on a background thread; False if already running."""
        if self._loop_thread is not None and not self._loop_stop.is_set():
            return False
        self._loop_stop.clear()
        self._loop_thread = threading.Thread(target=self._loop, daemon=True)
        self._loop_thread.start()
        return True

    def stop(self) -> bool:
        """Stop the cycle clock; False if it was not running."""
        thread = self._loop_thread
        if thread is None or self._loop_stop.is_set():
            return False
        self._loop_stop.set()
        thread.join()
        return True

    # --- batch process generation --------------------------------------

    def batch_step(self) -> Process | None:
        """Create and queue a process if a new batch cycle has been reached."""
        frequency = self.config.batch_process_freq
        if frequency <= 0:
            raise ValueError(f"batch-process-freq must be positive, got {frequency}")
        current = self.cycles
        if current % frequency != 0 or current == self._last_batch_cycle:
            return None
        self._last_batch_cycle = current
        process = self.process_factory()
        self.add_process(process)
        return process

    def _batch_loop(self) -> None:
        while not self._batch_stop.is_set():
            self.batch_step()
            time.sleep(_BATCH_PAUSE)

    def start_batch(self) -> bool:
        """Start generating processes; False if generation already runs."""
        if self.batching:
            return False
        if self.config.batch_process_freq <= 0:
            raise ValueError(
                f"batch-process-freq must be positive, got {self.config.batch_process_freq}"
            )
        self._batch_stop.clear()
        self._batch_thread = threading.Thread(target=self._batch_loop, daemon=True)
        self._batch_thread.start()
        return True

    def stop_batch(self) -> bool:
        """Stop generating processes; False if generation was not running."""
        if not self.batching:
            return False
        self._batch_stop.set()
        thread = self._batch_thread
        if thread is not None:
            thread.join()
        return True

    # --- reports --------------------------------------------------------

    def ready_queue_report(self) -> str:
        processes = self.ready_processes
        if not processes:
            return "Ready Queue is empty.\n\n"
        lines = ["Ready Queue:"]
        lines.extend(
            f"Process ID: {p.pid}, Process Name: {p.name}" for p in processes
        )
        return "\n".join(lines) + "\n\n"

    def _utilization_body(self) -> str:
        busy = self.working_cores
        total = len(self.workers)
        available = total - busy
        utilization = busy * 100 / total if total else 0.0
        parts = [
            f"CPU Utilization: {utilization:.2f}%\n",
            f"Cores used: {busy}\n",
            f"Cores available: {available}\n\n",
            _SEPARATOR,
            "Running processes:\n",
        ]
        running = sorted(
            self.running_processes, key=lambda p: p.assigned_cpu_id, reverse=True
        )
        for process in running:
            core = process.assigned_cpu_id
            if core == -1:
                continue
            parts.append(
                f"{process.name:<12} ({_timestamp(process.start_time)})    "
                f"Core: {core}   {process.current_line}/{process.lines_of_code}\n"
            )
        parts.append("\nFinished processes:\n")
        for process in self.finished_processes:
            parts.append(
                f"{process.name:<12} ({_timestamp(process.start_time)})    "
                f"Finished  {process.current_line}/{process.lines_of_code}\n"
            )
        parts.append(_SEPARATOR)
        return "".join(parts)

    def status_report(self) -> str:
        """Core usage and the running and finished processes."""
        return "\n" + self._utilization_body()

    def write_utilization_report(self, path: str | Path) -> Path:
        """Write the status report to ``path``; return its absolute path."""
        target = Path(path)
        target.write_text(self._utilization_body())
        return target.resolve()