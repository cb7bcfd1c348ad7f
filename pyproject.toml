[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pbench"
version = "0.1.0"
description = "Workload generation, latency statistics and linearizability checking for key-value stores"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "benchmark",
    "linearizability",
    "key-value",
    "latency",
    "hybrid-logical-clock",
    "ballot",
    "distributed-systems",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Benchmark",
    "Topic :: System :: Distributed Computing",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
pbench-checker = "pbench.checker_cli:main"

[tool.hatch.build.targets.wheel]
packages = ["pbench"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
