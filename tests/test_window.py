"""
Unit tests for :class:`loadgen.window.RollingWindow` (size-bounded FIFO).
"""

import pytest

from loadgen.window import RollingWindow


def test_cap_drops_oldest_first():
    w: RollingWindow[int] = RollingWindow(3)
    for i in range(7):
        w.append(i)
        assert len(w) <= 3
    assert w.to_list() == [4, 5, 6]


def test_below_cap_keeps_everything():
    w: RollingWindow[int] = RollingWindow(50)
    for i in range(10):
        w.append(i)
    assert list(w) == list(range(10))


def test_replace_in_place():
    """Replacement keeps the element's position in the window."""
    w: RollingWindow[str] = RollingWindow(5)
    for s in ("a", "b", "c"):
        w.append(s)
    assert w.replace(lambda x: x == "b", "B") is True
    assert w.to_list() == ["a", "B", "c"]
    assert w.replace(lambda x: x == "zzz", "Z") is False


def test_clear():
    w: RollingWindow[int] = RollingWindow(2)
    w.append(1)
    w.clear()
    assert len(w) == 0


def test_rejects_non_positive_cap():
    with pytest.raises(ValueError):
        RollingWindow(0)
