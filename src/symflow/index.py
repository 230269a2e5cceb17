# index.py
from __future__ import annotations

from typing import Dict, Iterator, Optional, Set

from .model import JobRecord, SymbolKey


class SymbolIndex:
    """Symbol key -> ids of jobs that produce it."""

    def __init__(self) -> None:
        self._producers: Dict[SymbolKey, Set[int]] = {}

    def add(self, key: SymbolKey, jobid: int) -> None:
        self._producers.setdefault(key, set()).add(jobid)

    def producers(self, key: SymbolKey) -> Set[int]:
        # copy so callers can't mutate the index through the result
        return set(self._producers.get(key, ()))

    def outputs_of(self, jobid: int) -> list[SymbolKey]:
        return [k for k, ids in self._producers.items() if jobid in ids]


class JobRegistry:
    """Job id -> adjacency record."""

    def __init__(self) -> None:
        self._jobs: Dict[int, JobRecord] = {}

    def insert(self, record: JobRecord) -> None:
        if record.jobid in self._jobs:
            raise ValueError(f"Job {record.jobid} already exists")
        self._jobs[record.jobid] = record

    def get(self, jobid: int) -> Optional[JobRecord]:
        return self._jobs.get(jobid)

    def remove(self, jobid: int) -> Optional[JobRecord]:
        """
        Drop a record without touching edges that point at it.

        Pruning is an external concern; whoever prunes owns edge cleanup.
        """
        return self._jobs.pop(jobid, None)

    def ids(self) -> list[int]:
        return sorted(self._jobs)

    def __contains__(self, jobid: object) -> bool:
        return jobid in self._jobs

    def __iter__(self) -> Iterator[JobRecord]:
        return iter(self._jobs.values())

    def __len__(self) -> int:
        return len(self._jobs)
