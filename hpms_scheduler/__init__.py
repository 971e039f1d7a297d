"""
HPMS scheduler package.

Simulates preemptive priority, FCFS, SJF and round robin CPU scheduling on
hospital patient management workloads and compares their performance.
"""

__all__ = ["cli"]
