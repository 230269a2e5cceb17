# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Set, Tuple


class DependencyType(str, Enum):
    IN = "in"
    OUT = "out"
    INOUT = "inout"

    @classmethod
    def parse(cls, value: "str | DependencyType") -> "DependencyType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown dependency type {value!r}. Expected one of: in, out, inout"
            ) from None


class Event(str, Enum):
    """Lifecycle events a caller may deliver for a registered job."""
    SUBMIT = "submit"
    DEPEND = "depend"
    ALLOC = "alloc"
    FINISH = "finish"


class JobState(str, Enum):
    REGISTERED = "registered"
    SUBMITTED = "submitted"
    DEPENDENT = "dependent"
    ALLOCATED = "allocated"
    FINISHED = "finished"


# event -> state the job is in once the event has been applied
EVENT_TARGET = {
    Event.SUBMIT: JobState.SUBMITTED,
    Event.DEPEND: JobState.DEPENDENT,
    Event.ALLOC: JobState.ALLOCATED,
    Event.FINISH: JobState.FINISHED,
}

# event -> state the job must be in for the event to be accepted (strict mode)
EVENT_SOURCE = {
    Event.SUBMIT: JobState.REGISTERED,
    Event.DEPEND: JobState.SUBMITTED,
    Event.ALLOC: JobState.DEPENDENT,
    Event.FINISH: JobState.ALLOCATED,
}


SymbolKey = Tuple[Optional[str], str]


@dataclass(frozen=True)
class Dependency:
    """
    A symbol a job consumes and/or produces.

    `scope` is part of the lookup key: the same label in two scopes never links.
    """
    type: DependencyType
    label: str
    scope: str | None = None

    @property
    def key(self) -> SymbolKey:
        return (self.scope, self.label)

    @property
    def consumes(self) -> bool:
        return self.type in (DependencyType.IN, DependencyType.INOUT)

    @property
    def produces(self) -> bool:
        return self.type in (DependencyType.OUT, DependencyType.INOUT)


@dataclass
class JobRecord:
    """
    Adjacency record for one registered job.

    Edges are stored as job ids and resolved through the registry.
    """
    jobid: int
    ancestors: Set[int] = field(default_factory=set)
    children: Set[int] = field(default_factory=set)
    state: JobState = JobState.REGISTERED

    @property
    def blocked(self) -> bool:
        return bool(self.ancestors)
