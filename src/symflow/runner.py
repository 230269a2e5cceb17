# runner.py
from __future__ import annotations

import logging
import os
import runpy
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

from pydantic import ValidationError

from .engine import State
from .errors import WorkflowError
from .model import Dependency, Event
from .schema import GraphFile
from .settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class JobSpec:
    """A job as declared in a workflow: id + symbol dependencies (+ optional work)."""
    jobid: int
    dependencies: List[Dependency] = field(default_factory=list)
    name: Optional[str] = None
    run: Optional[Callable[[], Any]] = None

    @property
    def display_name(self) -> str:
        return f"{self.jobid} ({self.name})" if self.name else str(self.jobid)


# ----------------------------------------------------------------------
# Workflow loading (local file)
# ----------------------------------------------------------------------

def _load_python(path: Path) -> List[JobSpec]:
    module_name = f"symflow_workflow_{path.stem}"
    globals_dict = runpy.run_path(str(path), run_name=module_name)

    specs = None
    if "workflow" in globals_dict and callable(globals_dict["workflow"]):
        specs = globals_dict["workflow"]()
    elif "JOBS" in globals_dict:
        specs = globals_dict["JOBS"]

    if not isinstance(specs, list) or not all(isinstance(s, JobSpec) for s in specs):
        raise WorkflowError(
            "Workflow must return/define a List[JobSpec]. "
            "Define workflow() -> List[JobSpec] or JOBS = [JobSpec, ...].",
            path=str(path),
        )
    return specs


def _load_json(path: Path) -> List[JobSpec]:
    try:
        graph = GraphFile.model_validate_json(path.read_text(encoding="utf-8"))
    except ValidationError as e:
        raise WorkflowError(
            f"Invalid graph file: {e.error_count()} validation error(s)",
            path=str(path),
            errors="; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            ),
        ) from e
    return [
        JobSpec(jobid=j.id, dependencies=[d.to_dependency() for d in j.deps], name=j.name)
        for j in graph.jobs
    ]


def load_workflow(path: str | Path) -> List[JobSpec]:
    """
    Load job declarations from a workflow file.

    `.py` files must define either:
      - workflow() -> List[JobSpec]
      - JOBS = [JobSpec, ...]

    `.json` files hold {"jobs": [{"id": 1, "deps": [{"type": "out", "label": "x"}]}]}.
    """
    wf_path = Path(path).expanduser().resolve()
    if not wf_path.exists():
        raise WorkflowError(f"Workflow file not found: {wf_path}")
    if wf_path.suffix == ".py":
        return _load_python(wf_path)
    if wf_path.suffix == ".json":
        return _load_json(wf_path)
    raise WorkflowError(f"Workflow must be a .py or .json file, got: {wf_path.name}")


# ----------------------------------------------------------------------
# Registration + planning
# ----------------------------------------------------------------------

def register_all(state: State, specs: Iterable[JobSpec]) -> State:
    for spec in specs:
        state.add_job(spec.jobid, spec.dependencies)
    return state


def _submit_all(state: State) -> List[int]:
    ready: set[int] = set()
    for jobid in state.job_ids():
        ready |= state.job_event(jobid, Event.SUBMIT)
    return sorted(ready)


def plan(specs: Iterable[JobSpec], settings: Optional[Settings] = None) -> List[List[int]]:
    """
    Dry run: waves of job ids that become ready together when every job
    of the previous wave finishes.

    Jobs that never entered the registry (zero dependencies with
    register_empty_jobs=False) appear in no wave.
    """
    state = register_all(State(settings), specs)
    ready = _submit_all(state)
    waves: List[List[int]] = []

    while ready:
        waves.append(ready)
        nxt: set[int] = set()
        for jobid in ready:
            state.job_event(jobid, Event.DEPEND)
            state.job_event(jobid, Event.ALLOC)
            nxt |= state.job_event(jobid, Event.FINISH)
        ready = sorted(nxt)

    return waves


# ----------------------------------------------------------------------
# Local driver
# ----------------------------------------------------------------------

def _call_spec(spec: JobSpec) -> None:
    if spec.run is not None:
        spec.run()


def drive(
    specs: Iterable[JobSpec],
    run_fn: Optional[Callable[[JobSpec], Any]] = None,
    *,
    max_workers: int | None = None,
    fail_fast: bool = True,
    settings: Optional[Settings] = None,
) -> Dict[int, str]:
    """
    Run jobs as they become ready, feeding lifecycle events back into a State.

    Returns jobid -> "ok" | "failed" | "blocked" | "dropped".
    """
    settings = settings or Settings()
    specs = list(specs)
    by_id = {s.jobid: s for s in specs}
    state = register_all(State(settings), specs)
    run_fn = run_fn or _call_spec

    if max_workers is None:
        max_workers = settings.max_workers
    if max_workers is None:
        c = os.cpu_count() or 2
        max_workers = max(1, c - 1)

    ready: List[int] = _submit_all(state)
    results: Dict[int, str] = {}
    failed = False
    in_flight: Dict[Future, int] = {}

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        while ready or in_flight:
            # schedule all currently ready
            while ready and not (fail_fast and failed):
                jobid = ready.pop(0)
                state.job_event(jobid, Event.DEPEND)
                state.job_event(jobid, Event.ALLOC)
                in_flight[pool.submit(run_fn, by_id[jobid])] = jobid

            if not in_flight:
                break

            # wait for one completion, then loop to schedule newly-ready jobs
            fut = next(as_completed(list(in_flight.keys())))
            jobid = in_flight.pop(fut)

            try:
                fut.result()
            except Exception as e:
                results[jobid] = "failed"
                logger.error("job %s failed: %s", by_id[jobid].display_name, e)
                failed = True
                continue

            results[jobid] = "ok"
            ready.extend(sorted(state.job_event(jobid, Event.FINISH)))

    for jobid in state.job_ids():
        results.setdefault(jobid, "blocked")
    # zero-dependency jobs never registered (register_empty_jobs=False)
    for spec in specs:
        results.setdefault(spec.jobid, "dropped")
    return results
