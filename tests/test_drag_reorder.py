"""Tests for the drag reorder engine."""

import pytest

from funnel_studio.editor.drag_reorder import (
    DragActivation,
    DragPhase,
    DragReorderEngine,
    array_move,
)


class OrderHolder:
    """Minimal owning store for the engine."""

    def __init__(self, order, accept=True):
        self.order = list(order)
        self.accept = accept
        self.commits = []

    def get_order(self):
        return list(self.order)

    def commit(self, new_order):
        self.commits.append(new_order)
        if self.accept:
            self.order = list(new_order)
        return self.accept


@pytest.fixture
def holder():
    return OrderHolder(["a", "b", "c"])


@pytest.fixture
def engine(holder, clock):
    return DragReorderEngine(holder.get_order, holder.commit, DragActivation(distance=8, delay_ms=150), clock)


class TestArrayMove:
    """Tests for array_move."""

    def test_move_forward(self):
        """Moving forward shifts the others back."""
        assert array_move(["a", "b", "c"], 0, 2) == ["b", "c", "a"]

    def test_move_backward(self):
        """Moving backward shifts the others forward."""
        assert array_move(["a", "b", "c"], 2, 0) == ["c", "a", "b"]


class TestPointerSensor:
    """Tests for pointer drags."""

    def test_drag_and_drop(self, engine, holder, clock):
        """A held, moved press reorders on drop."""
        engine.pointer_down("a", 0, 0)
        clock.advance(0.2)
        engine.pointer_move(20, 0, "c")
        assert engine.is_dragging
        result = engine.pointer_up()
        assert result.committed
        assert holder.order == ["b", "c", "a"]
        assert engine.phase == DragPhase.IDLE

    def test_quick_click_is_not_a_drag(self, engine, holder):
        """Press and release without moving is a click."""
        engine.pointer_down("b", 0, 0)
        result = engine.pointer_up()
        assert result.was_click
        assert result.active_id == "b"
        assert holder.commits == []

    def test_distance_without_delay_is_not_a_drag(self, engine, holder, clock):
        """A fast flick does not start a drag."""
        engine.pointer_down("a", 0, 0)
        clock.advance(0.05)
        engine.pointer_move(50, 0, "c")
        assert engine.phase == DragPhase.PENDING
        assert engine.pointer_up().was_click
        assert holder.commits == []

    def test_delay_without_distance_is_not_a_drag(self, engine, clock):
        """A long press that barely moves stays a click."""
        engine.pointer_down("a", 0, 0)
        clock.advance(1.0)
        engine.pointer_move(3, 4, "b")
        assert engine.phase == DragPhase.PENDING

    def test_drop_outside_target_is_noop(self, engine, holder, clock):
        """Dropping over nothing leaves the order alone."""
        engine.pointer_down("a", 0, 0)
        clock.advance(0.2)
        engine.pointer_move(0, 40, None)
        result = engine.pointer_up()
        assert not result.committed
        assert result.order == ["a", "b", "c"]
        assert holder.commits == []

    def test_drop_on_self_is_noop(self, engine, holder, clock):
        """Dropping an item on itself commits nothing."""
        engine.pointer_down("b", 0, 0)
        clock.advance(0.2)
        engine.pointer_move(0, 10, "b")
        assert not engine.pointer_up().committed
        assert holder.commits == []

    def test_rejected_commit_keeps_order(self, clock):
        """A refused commit reports the unchanged order."""
        holder = OrderHolder(["a", "b"], accept=False)
        engine = DragReorderEngine(holder.get_order, holder.commit, clock=clock)
        engine.pointer_down("a", 0, 0)
        clock.advance(0.2)
        engine.pointer_move(0, 30, "b")
        result = engine.pointer_up()
        assert not result.committed
        assert result.order == ["a", "b"]


class TestKeyboardSensor:
    """Tests for keyboard drags."""

    def test_pick_up_move_and_drop(self, engine, holder):
        """Space picks up, arrows move, Enter drops."""
        assert engine.key_down("Space", "a") is None
        engine.key_down("ArrowDown")
        engine.key_down("ArrowDown")
        engine.key_down("ArrowDown")
        result = engine.key_down("Enter")
        assert result.committed
        assert holder.order == ["b", "c", "a"]

    def test_escape_cancels(self, engine, holder):
        """Escape abandons the drag."""
        engine.key_down("Enter", "c")
        engine.key_down("ArrowUp")
        result = engine.key_down("Escape")
        assert not result.committed
        assert engine.phase == DragPhase.IDLE
        assert holder.commits == []
