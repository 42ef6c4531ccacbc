import time
import pytest

from kinolab.planning.termination import any_of, as_termination, iteration_termination, timed_termination


def test_iteration_termination_counts_polls():
    done = iteration_termination(2)
    assert [done(), done(), done(), done()] == [False, False, True, True]


def test_timed_termination():
    assert timed_termination(0.0)()
    done = timed_termination(10.0)
    assert not done()


def test_timed_termination_expires():
    done = timed_termination(0.05)
    time.sleep(0.1)
    assert done()


def test_any_of():
    assert any_of(iteration_termination(5), timed_termination(0.0))()
    assert not any_of(iteration_termination(5), timed_termination(10.0))()


def test_as_termination_accepts_seconds():
    assert not as_termination(10)()
    assert as_termination(0.0)()
    cond = iteration_termination(1)
    assert as_termination(cond) is cond
    with pytest.raises(TypeError):
        as_termination("soon")
    with pytest.raises(ValueError):
        timed_termination(-1.0)
