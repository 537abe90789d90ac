import itertools
import time

import pytest

from csopesy.config import Config
from csopesy.memory import FlatMemoryAllocator
from csopesy.process import Process, ProcessState
from csopesy.worker import CPUWorker


class FakeScheduler:
    def __init__(self, algo="fcfs", snapshot_dir=None, running=0, ready=0, quantum=2):
        self.config = Config(
            num_cpu=1, scheduler=algo, quantum_cycles=quantum, delay_per_exec=0
        )
        self.allocator = FlatMemoryAllocator(16384, 4096, 4)
        self.snapshot_dir = snapshot_dir
        self.running_count = running
        self.ready_count = ready
        self.requeued = []
        self.increments = 0
        self.decrements = 0
        self._clock = itertools.count()

    @property
    def cycles(self):
        return next(self._clock)

    def add_process(self, process):
        self.requeued.append(process)

    def increment_working_cores(self):
        self.increments += 1

    def decrement_working_cores(self):
        self.decrements += 1


def test_assign_sets_cpu_id():
    worker = CPUWorker(3, FakeScheduler())
    process = Process(1, "p1", instruction_count=2)
    worker.assign(process)
    assert worker.process is process
    assert process.assigned_cpu_id == 3


def test_can_accept_rules():
    fcfs = CPUWorker(0, FakeScheduler("fcfs"))
    rr = CPUWorker(0, FakeScheduler("rr"))
    assert fcfs.can_accept()
    process = Process(1, "p1", instruction_count=1)
    process.set_state(ProcessState.RUNNING)
    fcfs.assign(process)
    assert not fcfs.can_accept()
    process.set_state(ProcessState.WAITING)
    assert not fcfs.can_accept()
    rr.assign(process)
    assert rr.can_accept()
    process.set_state(ProcessState.FINISHED)
    assert fcfs.can_accept()


def test_run_fcfs_completes_process():
    scheduler = FakeScheduler()
    worker = CPUWorker(0, scheduler)
    process = Process(1, "p1", instruction_count=5)
    worker.assign(process)
    worker.working = True
    worker.run_fcfs(1)
    assert process.current_line == process.lines_of_code
    assert process.state is ProcessState.FINISHED
    assert not worker.working
    assert (scheduler.increments, scheduler.decrements) == (1, 1)


def test_run_rr_without_contention_finishes(tmp_path):
    scheduler = FakeScheduler("rr", snapshot_dir=tmp_path, running=1, ready=0)
    worker = CPUWorker(0, scheduler)
    process = Process(1, "p1", instruction_count=5)
    worker.assign(process)
    worker.run_rr(1, 2, 1)
    assert process.is_state_finished()
    assert scheduler.requeued == []
    assert (tmp_path / "memory_stamp_5.txt").exists()


def test_run_rr_preempts_after_quantum(tmp_path):
    scheduler = FakeScheduler("rr", snapshot_dir=tmp_path, running=3, ready=3)
    worker = CPUWorker(0, scheduler)
    process = Process(1, "p1", instruction_count=5)
    worker.assign(process)
    worker.run_rr(1, 2, 1)
    assert process.current_line == 2
    assert process.state is ProcessState.WAITING
    assert process.assigned_cpu_id == -1
    assert scheduler.requeued == [process]
    assert (tmp_path / "memory_stamp_2.txt").exists()
    assert scheduler.decrements == 1


def test_run_rr_skips_snapshots_without_directory():
    scheduler = FakeScheduler("rr", running=3, ready=3)
    worker = CPUWorker(0, scheduler)
    process = Process(1, "p1", instruction_count=3)
    worker.assign(process)
    worker.run_rr(1, 1, 1)
    assert process.current_line == 1
    assert scheduler.requeued == [process]


def test_start_runs_in_background():
    scheduler = FakeScheduler("fcfs")
    worker = CPUWorker(0, scheduler)
    process = Process(1, "p1", instruction_count=4)
    worker.assign(process)
    worker.start()
    deadline = time.monotonic() + 5
    while not process.is_state_finished() and time.monotonic() < deadline:
        time.sleep(0.01)
    assert process.is_state_finished()
    assert process.current_line == 4


def test_start_without_process_raises():
    with pytest.raises(RuntimeError):
        CPUWorker(0, FakeScheduler()).start()


def test_start_unknown_algorithm_raises():
    worker = CPUWorker(0, FakeScheduler("sjf"))
    worker.assign(Process(1, "p1", instruction_count=1))
    with pytest.raises(ValueError):
        worker.start()
    assert not worker.working