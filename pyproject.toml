[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ycsb"
version = "0.1.0"
description = "YCSB-style benchmark client with core workloads and basic, SQLite and LMDB drivers"
requires-python = ">=3.10"
keywords = ["benchmark", "ycsb", "key-value", "database", "workload", "sqlite", "lmdb", "zipfian"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database",
    "Topic :: System :: Benchmark",
]
dependencies = [
    "lmdb",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
ycsb = "ycsb.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["ycsb"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
