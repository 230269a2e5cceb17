from __future__ import annotations

import logging

import pytest

from symflow import DuplicateJob, In, InOut, InvalidJobID, MissingJob, Out, Settings, State


def assert_symmetric(state: State) -> None:
    for jobid in state.job_ids():
        for child in state.children(jobid):
            if child in state:
                assert jobid in state.ancestors(child)
        for parent in state.ancestors(jobid):
            assert jobid in state.children(parent)


class TestEdgeWiring:
    def test_producer_then_consumer_links(self, state):
        state.add_job(1, [Out("foo")])
        state.add_job(2, [In("foo")])

        assert state.ancestors(2) == {1}
        assert state.children(1) == {2}
        assert_symmetric(state)

    def test_consumer_before_producer_never_links(self, state):
        state.add_job(1, [In("foo")])
        state.add_job(2, [Out("foo")])

        assert state.ancestors(1) == set()
        assert state.children(2) == set()

    def test_unknown_label_is_unconstrained(self, state):
        state.add_job(1, [In("nobody-makes-this")])
        assert state.ancestors(1) == set()
        assert state.last_errors == []

    def test_inout_has_no_self_edge(self, state):
        state.add_job(1, [InOut("foo")])
        assert state.ancestors(1) == set()
        assert state.children(1) == set()
        assert state.producers("foo") == {1}

    def test_out_then_in_same_label_has_no_self_edge(self, state):
        state.add_job(1, [Out("foo"), In("foo")])
        assert state.ancestors(1) == set()
        assert state.last_errors == []

    def test_multiple_producers_fan_in(self, state):
        state.add_job(1, [Out("bar")])
        state.add_job(2, [Out("bar")])
        state.add_job(3, [In("bar")])

        assert state.producers("bar") == {1, 2}
        assert state.ancestors(3) == {1, 2}
        assert_symmetric(state)

    def test_inout_chain_links_every_prior_producer(self, chain):
        assert chain.ancestors(2) == {1}
        assert chain.ancestors(3) == {1, 2}
        assert chain.children(1) == {2, 3}
        assert chain.producers("foo") == {1, 2}
        assert_symmetric(chain)

    def test_same_producer_through_two_labels_is_one_edge(self, state):
        state.add_job(1, [Out("a"), Out("b")])
        state.add_job(2, [In("a"), In("b")])
        assert state.ancestors(2) == {1}
        assert state.children(1) == {2}

    def test_scopes_do_not_link(self, state):
        state.add_job(1, [Out("raw", scope="docs")])
        state.add_job(2, [In("raw")])
        state.add_job(3, [In("raw", scope="docs")])

        assert state.ancestors(2) == set()
        assert state.ancestors(3) == {1}
        assert state.producers("raw") == set()
        assert state.producers("raw", scope="docs") == {1}

    def test_outputs_lists_labels(self, state):
        state.add_job(1, [Out("b"), Out("a", scope="s")])
        assert state.outputs(1) == ["b", "s:a"]


class TestRegistration:
    def test_duplicate_job_rejected_without_mutation(self, state):
        state.add_job(1, [Out("foo")])
        with pytest.raises(DuplicateJob) as exc:
            state.add_job(1, [Out("bar")])
        assert exc.value.jobid == 1
        assert state.producers("bar") == set()

    def test_empty_dependencies_registered_by_default(self, state):
        state.add_job(7, [])
        assert 7 in state
        assert state.job_event(7, "submit") == {7}

    def test_empty_dependencies_dropped_in_legacy_mode(self):
        state = State(Settings(register_empty_jobs=False))
        state.add_job(7, [])
        assert 7 not in state
        with pytest.raises(InvalidJobID):
            state.job_event(7, "submit")

    def test_finish_keeps_recorded_children(self, state):
        state.add_job(1, [Out("foo")])
        state.add_job(2, [In("foo")])
        state.job_event(1, "finish")
        # finishing does not drop recorded children
        assert state.children(1) == {2}


class TestMissingProducer:
    def test_missing_producer_is_reported_and_job_still_registered(self, state, caplog):
        state.add_job(1, [Out("foo")])
        state.registry.remove(1)

        with caplog.at_level(logging.WARNING, logger="symflow.resolver"):
            state.add_job(2, [In("foo")])

        assert 2 in state
        assert state.ancestors(2) == set()
        assert len(state.last_errors) == 1
        err = state.last_errors[0]
        assert isinstance(err, MissingJob)
        assert err.producer == 1
        assert err.label == "foo"
        assert "producer 1" in caplog.text

    def test_failing_dependency_rolls_back_only_its_own_edges(self, state):
        state.add_job(1, [Out("foo")])
        state.add_job(2, [Out("foo")])
        state.add_job(3, [Out("bar")])
        state.registry.remove(2)

        # "bar" wires first, then "foo" links 1 before hitting missing 2
        state.add_job(4, [In("bar"), In("foo")])

        assert state.ancestors(4) == {3}
        assert state.children(1) == set()
        assert state.children(3) == {4}
        assert [e.producer for e in state.last_errors] == [2]

    def test_rollback_keeps_edge_from_earlier_dependency(self, state):
        state.add_job(1, [Out("a"), Out("b")])
        state.add_job(2, [Out("b")])
        state.registry.remove(2)

        state.add_job(3, [In("a"), In("b")])

        assert state.ancestors(3) == {1}
        assert state.children(1) == {3}

    def test_inout_still_publishes_output_when_input_fails(self, state):
        state.add_job(1, [Out("foo")])
        state.registry.remove(1)

        state.add_job(2, [InOut("foo")])
        assert 2 in state.producers("foo")

    def test_later_dependencies_still_processed(self, state):
        state.add_job(1, [Out("foo")])
        state.add_job(2, [Out("bar")])
        state.registry.remove(1)

        state.add_job(3, [In("foo"), In("bar"), Out("baz")])

        assert state.ancestors(3) == {2}
        assert state.producers("baz") == {3}

    def test_strict_registration_raises_after_inserting(self):
        state = State(Settings(strict_registration=True))
        state.add_job(1, [Out("foo")])
        state.registry.remove(1)

        with pytest.raises(MissingJob):
            state.add_job(2, [In("foo")])
        assert 2 in state

    def test_last_errors_reset_per_call(self, state):
        state.add_job(1, [Out("foo")])
        state.registry.remove(1)
        state.add_job(2, [In("foo")])
        assert state.last_errors

        state.add_job(3, [Out("x")])
        assert state.last_errors == []
