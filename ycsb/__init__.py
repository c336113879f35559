"""YCSB-style benchmark client: core workloads, generators, measurements and basic, SQLite and LMDB drivers."""

__version__ = "0.1.0"