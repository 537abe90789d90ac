# csopesy

A small library for emulating parts of an operating system. It reads a
configuration file, builds processes out of instruction lists, and runs them on
simulated CPU cores. The cores are scheduled first-come-first-served (`fcfs`)
or round-robin (`rr`). Processes are placed in a flat, slot-based memory.

## Installing

```
pip install .
```

## Modules

- `csopesy.config` reads settings. `parse_config(text)` and `load_config(path)`
  return a frozen `Config`. Its fields are `num_cpu`, `scheduler`,
  `quantum_cycles`, `batch_process_freq`, `min_ins`, `max_ins`,
  `delay_per_exec`, `max_overall_mem`, `mem_per_frame` and `mem_per_proc`.
  - Unknown keys are ignored.
  - A missing, non-numeric or negative value raises `ConfigError`.
  - `Config.describe()` returns the scheduling settings in file syntax.
  - `random_instruction_count(min_ins, max_ins, rng)` picks an instruction
    count between the two bounds, inclusive.
- `csopesy.commands` holds the instructions:
  - `Command` is the abstract base.
  - `CommandType` names the kinds of instruction.
  - `PrintCommand(message, log_dir)` does nothing when `log_dir` is `None`.
    Otherwise it appends a timestamped line to `<log_dir>/<process>.txt`.
    `format_log_entry` builds that line.
- `csopesy.process` defines `Process` and `ProcessState`. A `Process` holds:
  - its pid and name,
  - its memory sizes,
  - its commands,
  - its current instruction line, state and assigned core.

  `set_state` accepts a `ProcessState` or its name. Any other name raises
  `ValueError`.
- `csopesy.memory` defines `FlatMemoryAllocator(max_overall_memory,
  memory_per_process, slots)`, with equal slots that each hold one process.
  - `allocate` and `deallocate` place and remove processes.
  - `is_allocated`, `allocated_slots`, `has_free_slots` and `fragmentation`
    report on the layout.
  - `render` and `visualize` draw the layout as text. `visualize` marks
    waiting processes with ` *`.
  - `write_report(path)` writes the layout to a file.
  - `write_cycle_snapshot(directory, n)` writes a new `memory_stamp_<n>.txt`
    without overwriting an existing one.
- `csopesy.worker` defines `CPUWorker`, one core. `start()` runs the assigned
  process on a background thread and paces it by the scheduler's cycle counter.
  Which loop runs depends on `config.scheduler`:
  - `run_fcfs` runs the process to completion.
  - `run_rr` runs at most `quantum_cycles` instructions while other processes
    compete for the cores, then puts the process back in the ready queue in
    the `WAITING` state.
- `csopesy.scheduler` defines `Scheduler(config, allocator, process_factory)`.
  - `tick()` advances the clock one cycle and hands ready processes to idle
    cores.
  - `start()` and `stop()` run the clock on a background thread.
  - `start_batch()`, `stop_batch()` and `batch_step()` create a process with
    `process_factory` every `batch_process_freq` cycles.
  - `ready_queue_report()` and `status_report()` return text.
    `write_utilization_report(path)` writes the status to a file.
  - Setting `snapshot_dir` makes round-robin cores write memory snapshots
    there.

## Example

```python
import itertools
import time

from csopesy.config import parse_config, random_instruction_count
from csopesy.memory import FlatMemoryAllocator
from csopesy.process import Process
from csopesy.scheduler import Scheduler

config = parse_config(
    'num-cpu 2\nscheduler "fcfs"\nmin-ins 5\nmax-ins 10\n'
    "max-overall-mem 16384\nmem-per-frame 16\nmem-per-proc 4096\n"
)
allocator = FlatMemoryAllocator(config.max_overall_mem, config.mem_per_proc, 4)
pids = itertools.count(1)

def new_process():
    pid = next(pids)
    count = random_instruction_count(config.min_ins, config.max_ins)
    return Process(pid, f"process_{pid}", config.mem_per_frame, config.mem_per_proc, count)

scheduler = Scheduler(config, allocator, new_process)
scheduler.add_process(new_process())
scheduler.add_process(new_process())
scheduler.start()
time.sleep(0.5)
scheduler.stop()
print(scheduler.status_report())
print(allocator.visualize())
```

## What it does not do

The package is a library only. It has:

- no interactive shell and no command to run;
- no screens for attaching to a process;
- no marquee display;
- no GPU-style process table.

To run an emulation, call the classes above from your own code.

## Running the tests

```
pip install .[test]
pytest
```