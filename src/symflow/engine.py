# engine.py
from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple, Union

from . import resolver
from .errors import InvalidEvent, InvalidJobID, InvalidTransition, MissingDescendent, MissingJob
from .index import JobRegistry, SymbolIndex
from .model import EVENT_SOURCE, EVENT_TARGET, Dependency, Event, JobRecord, JobState
from .settings import Settings

logger = logging.getLogger(__name__)


class State:
    """
    Owner of the job registry and symbol index.

    All mutation goes through one re-entrant lock, so a State can be shared
    between threads as long as callers only use its methods.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.registry = JobRegistry()
        self.index = SymbolIndex()
        # MissingJob errors reported by the most recent add_job
        self.last_errors: List[MissingJob] = []
        self.lock = threading.RLock()

    # ---- mutation ----

    def add_job(self, jobid: int, dependencies: Sequence[Dependency]) -> None:
        resolver.add_job(self, jobid, dependencies)

    def job_event(self, jobid: int, event: Union[str, Event]) -> Set[int]:
        return job_event(self, jobid, event)

    # ---- queries ----

    def _record(self, jobid: int) -> JobRecord:
        record = self.registry.get(jobid)
        if record is None:
            raise InvalidJobID(jobid)
        return record

    def ancestors(self, jobid: int) -> Set[int]:
        with self.lock:
            return set(self._record(jobid).ancestors)

    def children(self, jobid: int) -> Set[int]:
        with self.lock:
            return set(self._record(jobid).children)

    def state_of(self, jobid: int) -> JobState:
        with self.lock:
            return self._record(jobid).state

    def producers(self, label: str, scope: Optional[str] = None) -> Set[int]:
        with self.lock:
            return self.index.producers((scope, label))

    def outputs(self, jobid: int) -> List[str]:
        with self.lock:
            self._record(jobid)
            return sorted(
                label if scope is None else f"{scope}:{label}"
                for scope, label in self.index.outputs_of(jobid)
            )

    def job_ids(self) -> List[int]:
        with self.lock:
            return self.registry.ids()

    def __contains__(self, jobid: object) -> bool:
        with self.lock:
            return jobid in self.registry

    def __len__(self) -> int:
        with self.lock:
            return len(self.registry)


# ----------------------------------------------------------------------
# Event handlers
# ----------------------------------------------------------------------

def _on_submit(state: State, record: JobRecord) -> Tuple[Set[int], Set[int]]:
    if record.blocked:
        return set(), set()
    return {record.jobid}, set()


def _on_marker(state: State, record: JobRecord) -> Tuple[Set[int], Set[int]]:
    return set(), set()


def _on_finish(state: State, record: JobRecord) -> Tuple[Set[int], Set[int]]:
    ready: Set[int] = set()
    missing: Set[int] = set()
    for childid in list(record.children):
        child = state.registry.get(childid)
        if child is None:
            missing.add(childid)
            continue
        if record.jobid not in child.ancestors:
            continue
        child.ancestors.discard(record.jobid)
        if not child.ancestors:
            ready.add(childid)
    return ready, missing


_HANDLERS: Dict[Event, Callable[[State, JobRecord], Tuple[Set[int], Set[int]]]] = {
    Event.SUBMIT: _on_submit,
    Event.DEPEND: _on_marker,
    Event.ALLOC: _on_marker,
    Event.FINISH: _on_finish,
}


def _check_transition(record: JobRecord, event: Event) -> None:
    if record.state == EVENT_SOURCE[event]:
        # a submitted job only moves on once nothing blocks it
        if event is Event.DEPEND and record.blocked:
            raise InvalidTransition(
                record.jobid, record.state.value, event.value, blocked_on=sorted(record.ancestors)
            )
        return
    if event is Event.SUBMIT and record.state == JobState.SUBMITTED:
        return
    raise InvalidTransition(record.jobid, record.state.value, event.value)


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------

def add_job(state: State, jobid: int, dependencies: Sequence[Dependency]) -> None:
    resolver.add_job(state, jobid, dependencies)


def job_event(state: State, jobid: int, event: Union[str, Event]) -> Set[int]:
    """
    Apply a lifecycle event and return the ids that became ready because of it.

    Raises InvalidJobID, InvalidEvent, InvalidTransition (strict lifecycle
    only) or MissingDescendent. A MissingDescendent is raised after every
    reachable child was processed; its `ready` attribute holds their ids.
    """
    with state.lock:
        record = state.registry.get(jobid)
        if record is None:
            raise InvalidJobID(jobid)
        try:
            ev = Event(event)
        except ValueError:
            raise InvalidEvent(jobid, str(event)) from None

        if state.settings.strict_lifecycle:
            _check_transition(record, ev)

        ready, missing = _HANDLERS[ev](state, record)
        record.state = EVENT_TARGET[ev]

        if missing:
            err = MissingDescendent(jobid, missing, ready)
            logger.warning("job %s: %s", jobid, err.message)
            raise err
        if ready:
            logger.debug("job %s %s -> ready %s", jobid, ev.value, sorted(ready))
        return ready
