# resolver.py
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Sequence, Set

from .errors import DuplicateJob, MissingJob
from .model import Dependency, JobRecord

if TYPE_CHECKING:
    from .engine import State

logger = logging.getLogger(__name__)


# ----------------------------------------------------------------------
# Edge wiring
# ----------------------------------------------------------------------

def _wire_inputs(state: State, record: JobRecord, dep: Dependency) -> Set[int]:
    """
    Link `record` to every currently known producer of `dep`.

    Returns the producer ids this call newly linked. On a missing producer the
    edges already added for this dependency are rolled back before raising.
    """
    added: Set[int] = set()
    for producer in sorted(state.index.producers(dep.key)):
        # Out(x) followed by In(x) in the same declaration: no self-edge
        if producer == record.jobid:
            continue
        parent = state.registry.get(producer)
        if parent is None:
            _rollback(state, record, added)
            raise MissingJob(record.jobid, producer, dep.label, dep.scope)
        if producer in record.ancestors:
            continue
        record.ancestors.add(producer)
        parent.children.add(record.jobid)
        added.add(producer)
    return added


def _rollback(state: State, record: JobRecord, added: Set[int]) -> None:
    # only edges added by the failing dependency; earlier ones stay
    for producer in added:
        record.ancestors.discard(producer)
        parent = state.registry.get(producer)
        if parent is not None:
            parent.children.discard(record.jobid)
    if added:
        logger.debug("job %s: rolled back edges to %s", record.jobid, sorted(added))


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------

def add_job(state: State, jobid: int, dependencies: Sequence[Dependency]) -> None:
    """
    Register `jobid`, wiring edges from its declared dependencies.

    Dependencies are processed in order. A dependency whose producer is
    missing from the registry is reported (logged + `state.last_errors`) and
    contributes no edges; processing continues and the job is registered with
    whatever edges were established.
    """
    deps = list(dependencies)
    with state.lock:
        if jobid in state.registry:
            raise DuplicateJob(jobid)

        errors: List[MissingJob] = []
        state.last_errors = errors

        if not deps and not state.settings.register_empty_jobs:
            logger.debug("job %s declares no dependencies; not registered", jobid)
            return

        record = JobRecord(jobid=jobid)
        for dep in deps:
            if dep.consumes:
                try:
                    added = _wire_inputs(state, record, dep)
                except MissingJob as e:
                    logger.warning("job %s: %s", jobid, e.message)
                    errors.append(e)
                else:
                    if added:
                        logger.debug("job %s: %r -> ancestors %s", jobid, dep.label, sorted(added))
            if dep.produces:
                state.index.add(dep.key, jobid)

        state.registry.insert(record)

        if errors and state.settings.strict_registration:
            raise errors[0]
