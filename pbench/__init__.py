"""Workload generation, latency statistics and linearizability checking for key-value stores."""

__version__ = "0.1.0"