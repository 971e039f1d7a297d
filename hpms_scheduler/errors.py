from __future__ import annotations


class WorkloadError(ValueError):
    """
    Raised when a process descriptor or a workload is malformed.

    Workloads are configuration, so bad data is rejected when it is built
    rather than tolerated by the schedulers.
    """
