# errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set


@dataclass(eq=False)
class SymflowError(Exception):
    """
    Structured engine error with enough context for:
      - clean CLI output
      - programmatic handling (kind + jobid)
      - debugging without full tracebacks
    """
    kind: str
    jobid: Optional[int]
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}"]
        if self.jobid is not None:
            lines.append(f"job={self.jobid}")
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


class InvalidJobID(SymflowError):
    def __init__(self, jobid: int):
        super().__init__("InvalidJobID", jobid, f"job {jobid} is not registered")


class InvalidEvent(SymflowError):
    def __init__(self, jobid: int, event: str):
        super().__init__(
            "InvalidEvent",
            jobid,
            f"unrecognized event {event!r}",
            {"expected": "submit|depend|alloc|finish"},
        )
        self.event = event


class DuplicateJob(SymflowError):
    def __init__(self, jobid: int):
        super().__init__("DuplicateJob", jobid, f"job {jobid} is already registered")


class MissingJob(SymflowError):
    """A producer listed in the symbol index is absent from the registry."""

    def __init__(self, jobid: int, producer: int, label: str, scope: Optional[str] = None):
        details: Dict[str, Any] = {"producer": producer, "label": label}
        if scope is not None:
            details["scope"] = scope
        super().__init__(
            "MissingJob",
            jobid,
            f"producer {producer} of {label!r} is not in the registry",
            details,
        )
        self.producer = producer
        self.label = label
        self.scope = scope


class MissingDescendent(SymflowError):
    """
    A child edge of a finishing job points at a job absent from the registry.

    The remaining children were still processed; `ready` holds the ids that
    became unblocked anyway.
    """

    def __init__(self, jobid: int, missing: Set[int], ready: Set[int]):
        super().__init__(
            "MissingDescendent",
            jobid,
            f"children {sorted(missing)} of job {jobid} are not in the registry",
            {"ready": sorted(ready)},
        )
        self.missing = set(missing)
        self.ready = set(ready)


class InvalidTransition(SymflowError):
    def __init__(self, jobid: int, current: str, event: str, blocked_on: Optional[List[int]] = None):
        details: Dict[str, Any] = {"state": current}
        message = f"event {event!r} not allowed while job is {current}"
        if blocked_on:
            details["blocked_on"] = blocked_on
            message += f" and blocked on {blocked_on}"
        super().__init__("InvalidTransition", jobid, message, details)
        self.current = current
        self.event = event
        self.blocked_on = list(blocked_on or [])


class WorkflowError(SymflowError):
    def __init__(self, message: str, **details: Any):
        super().__init__("WorkflowError", None, message, dict(details))
