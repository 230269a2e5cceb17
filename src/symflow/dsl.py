# src/symflow/dsl.py
from __future__ import annotations

from typing import Any, Callable, Iterable, List, Optional

from .model import Dependency, DependencyType
from .runner import JobSpec


# ---------------------------------------------------------------------
# Dependency helpers
# ---------------------------------------------------------------------

def In(label: str, *, scope: str | None = None) -> Dependency:
    """Consume `label`: wait for every job that produced it so far."""
    return Dependency(DependencyType.IN, label, scope)


def Out(label: str, *, scope: str | None = None) -> Dependency:
    """Produce `label` for jobs registered later."""
    return Dependency(DependencyType.OUT, label, scope)


def InOut(label: str, *, scope: str | None = None) -> Dependency:
    """Consume then re-produce `label` (a pipeline stage)."""
    return Dependency(DependencyType.INOUT, label, scope)


# ---------------------------------------------------------------------
# Functional job helper
# ---------------------------------------------------------------------

def job(
    jobid: int,
    *deps: Dependency,  # allow: job(1, Out("x"), In("y"))
    deps_list: Optional[List[Dependency]] = None,  # allow: job(1, deps_list=[...])
    name: str | None = None,
    run: Callable[[], Any] | None = None,
    scope: str | None = None,  # default scope for deps declared without one
) -> JobSpec:
    deps_final: List[Dependency] = []
    if deps_list:
        deps_final.extend(deps_list)
    deps_final.extend(deps)

    if scope is not None:
        deps_final = [
            d if d.scope is not None else Dependency(d.type, d.label, scope)
            for d in deps_final
        ]

    return JobSpec(jobid=jobid, dependencies=deps_final, name=name, run=run)


# ---------------------------------------------------------------------
# Builder API
# ---------------------------------------------------------------------

class JobBuilder:
    def __init__(self, jobid: int):
        self.jobid = jobid
        self._deps: list[Dependency] = []
        self._name: Optional[str] = None
        self._run: Optional[Callable[[], Any]] = None

    def consumes(self, *labels: str, scope: str | None = None):
        self._deps.extend(In(label, scope=scope) for label in labels)
        return self

    def produces(self, *labels: str, scope: str | None = None):
        self._deps.extend(Out(label, scope=scope) for label in labels)
        return self

    def updates(self, *labels: str, scope: str | None = None):
        self._deps.extend(InOut(label, scope=scope) for label in labels)
        return self

    def named(self, name: str):
        self._name = name
        return self

    def runs(self, fn: Callable[[], Any]):
        self._run = fn
        return self

    def build(self) -> JobSpec:
        return JobSpec(jobid=self.jobid, dependencies=list(self._deps), name=self._name, run=self._run)


def build(jobid: int) -> JobBuilder:
    """Convenience: build(3).consumes("foo").produces("bar").build()"""
    return JobBuilder(jobid)


# ---------------------------------------------------------------------
# Matrix
# ---------------------------------------------------------------------

class Matrix:
    """
    Minimal matrix expander.

    Example:
        matrix("shard", range(3)).jobs(
            lambda i: job(10 + i, In("raw"), Out("shards"))
        )
    """
    def __init__(self, key: str, values: Iterable[Any]):
        self.key = key
        self.values = list(values)

    def jobs(self, builder: Callable[[Any], JobSpec]) -> List[JobSpec]:
        return [builder(v) for v in self.values]


def matrix(key: str, values: Iterable[Any]) -> Matrix:
    return Matrix(key, values)


# ---------------------------------------------------------------------
# Workflow helper
# ---------------------------------------------------------------------

def wf(*items: JobSpec | List[JobSpec]) -> List[JobSpec]:
    """
    Workflow definition helper. Registration order is the order given here,
    so producers must come before their consumers.

        from symflow import wf, job, In, Out

        def workflow():
            return wf(
                job(1, Out("foo")),
                job(2, In("foo")),
            )

    Lists (e.g. from matrix(...).jobs(...)) are flattened in place.
    """
    out: List[JobSpec] = []
    for item in items:
        if isinstance(item, list):
            out.extend(item)
        else:
            out.append(item)
    return out
