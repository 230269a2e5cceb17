"""
Shared fixtures for symflow tests.

This module provides:
- Fresh engine states (default and strict lifecycle)
- Builders for the chain and fan-out graphs used across test modules
"""

from __future__ import annotations

import pytest

from symflow import In, InOut, Out, Settings, State


@pytest.fixture
def state() -> State:
    return State()


@pytest.fixture
def strict_state() -> State:
    return State(Settings(strict_lifecycle=True))


def build_chain(state: State) -> State:
    """1 Out(foo) -> 2 InOut(foo) -> 3 In(foo)"""
    state.add_job(1, [Out("foo")])
    state.add_job(2, [InOut("foo")])
    state.add_job(3, [In("foo")])
    return state


def build_fan_out(state: State) -> State:
    """1 Out(foo) -> {2,3,4} In(foo)+Out(bar) -> 5 In(bar)"""
    state.add_job(1, [Out("foo")])
    for jobid in (2, 3, 4):
        state.add_job(jobid, [In("foo"), Out("bar")])
    state.add_job(5, [In("bar")])
    return state


@pytest.fixture
def chain(state: State) -> State:
    return build_chain(state)


@pytest.fixture
def fan_out(state: State) -> State:
    return build_fan_out(state)
