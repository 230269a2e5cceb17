from __future__ import annotations

import pytest

from symflow import Dependency, DependencyType, In, InOut, Out, build, job, matrix, wf


def test_dependency_helpers():
    assert In("a") == Dependency(DependencyType.IN, "a")
    assert Out("a", scope="s").key == ("s", "a")
    dep = InOut("a")
    assert dep.consumes and dep.produces
    assert In("a").consumes and not In("a").produces
    assert Out("a").produces and not Out("a").consumes


def test_job_collects_dependencies_in_order():
    spec = job(3, In("a"), Out("b"), deps_list=[InOut("c")], name="three")
    assert spec.jobid == 3
    assert spec.name == "three"
    assert [d.label for d in spec.dependencies] == ["c", "a", "b"]
    assert spec.display_name == "3 (three)"


def test_job_default_scope_only_fills_unscoped():
    spec = job(1, In("a"), Out("b", scope="keep"), scope="team")
    assert [d.scope for d in spec.dependencies] == ["team", "keep"]


def test_builder():
    spec = build(4).consumes("a", "b").produces("c").updates("d").named("four").build()
    assert spec.dependencies == [In("a"), In("b"), Out("c"), InOut("d")]
    assert spec.name == "four"


def test_matrix_and_wf_flatten():
    specs = wf(
        job(1, Out("raw")),
        matrix("shard", range(2)).jobs(lambda i: job(10 + i, In("raw"))),
        job(20),
    )
    assert [s.jobid for s in specs] == [1, 10, 11, 20]


@pytest.mark.parametrize("raw, expected", [
    ("in", DependencyType.IN),
    ("OUT", DependencyType.OUT),
    (" InOut ", DependencyType.INOUT),
    (DependencyType.IN, DependencyType.IN),
])
def test_dependency_type_parse(raw, expected):
    assert DependencyType.parse(raw) is expected


def test_dependency_type_parse_rejects_unknown():
    with pytest.raises(ValueError, match="in, out, inout"):
        DependencyType.parse("both")
