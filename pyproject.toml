[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "csopesy"
version = "0.1.0"
description = "An operating-system emulator library: configuration, processes, FCFS and round-robin CPU scheduling, and flat memory allocation"
requires-python = ">=3.10"
dependencies = []
keywords = ["scheduler", "emulator", "fcfs", "round-robin", "memory-allocation", "operating-systems"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["csopesy"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
