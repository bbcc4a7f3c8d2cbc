"""Drag-to-reorder shared by steps, elements and content blocks."""

import logging
import math
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence

logger = logging.getLogger(__name__)


class DragPhase(Enum):
    IDLE = "idle"
    PENDING = "pending"  # pointer down, activation not yet reached
    DRAGGING = "dragging"


class DragSource(Enum):
    POINTER = "pointer"
    KEYBOARD = "keyboard"


@dataclass
class DragActivation:
    """Both thresholds must be met before a press becomes a drag."""
    distance: float = 8
    delay_ms: float = 150


@dataclass
class DropResult:
    committed: bool = False
    order: List[str] = field(default_factory=list)
    was_click: bool = False
    active_id: Optional[str] = None


def array_move(items: Sequence, from_index: int, to_index: int) -> list:
    """Remove the item at ``from_index`` and insert it at ``to_index``."""
    moved = list(items)
    item = moved.pop(from_index)
    moved.insert(to_index, item)
    return moved


PICK_UP_KEYS = ("Space", " ", "Enter")


class DragReorderEngine:
    """Turns pointer and keyboard gestures into committed reorders.

    ``get_order`` returns the current ids; ``commit`` receives the new order
    and returns whether the owning store accepted it.
    """

    def __init__(
        self,
        get_order: Callable[[], List[str]],
        commit: Callable[[List[str]], bool],
        activation: Optional[DragActivation] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.get_order = get_order
        self.commit = commit
        self.activation = activation or DragActivation()
        self.clock = clock
        self._reset()

    def _reset(self):
        self.phase = DragPhase.IDLE
        self.source: Optional[DragSource] = None
        self.active_id: Optional[str] = None
        self.over_id: Optional[str] = None
        self._origin = (0.0, 0.0)
        self._pressed_at = 0.0

    @property
    def is_dragging(self) -> bool:
        return self.phase == DragPhase.DRAGGING

    # Pointer sensor

    def pointer_down(self, item_id: str, x: float, y: float):
        if self.phase != DragPhase.IDLE:
            return
        self.phase = DragPhase.PENDING
        self.source = DragSource.POINTER
        self.active_id = item_id
        self._origin = (x, y)
        self._pressed_at = self.clock()

    def pointer_move(self, x: float, y: float, over_id: Optional[str] = None):
        """Track the pointer; ``over_id`` is the drop target under it, if any."""
        if self.phase == DragPhase.PENDING:
            moved = math.hypot(x - self._origin[0], y - self._origin[1])
            held_ms = (self.clock() - self._pressed_at) * 1000
            if moved >= self.activation.distance and held_ms >= self.activation.delay_ms:
                self.phase = DragPhase.DRAGGING
                logger.debug(f"Drag started for {self.active_id}")
        if self.phase == DragPhase.DRAGGING:
            self.over_id = over_id

    def pointer_up(self) -> DropResult:
        if self.phase == DragPhase.PENDING:
            result = DropResult(order=self.get_order(), was_click=True, active_id=self.active_id)
            self._reset()
            return result
        if self.phase == DragPhase.DRAGGING and self.source == DragSource.POINTER:
            return self._drop()
        return DropResult(order=self.get_order())

    # Keyboard sensor

    def key_down(self, key: str, item_id: Optional[str] = None) -> Optional[DropResult]:
        """Space/Enter picks up and drops, arrows move, Escape cancels."""
        if self.phase == DragPhase.IDLE:
            if key in PICK_UP_KEYS and item_id is not None:
                self.phase = DragPhase.DRAGGING
                self.source = DragSource.KEYBOARD
                self.active_id = item_id
                self.over_id = item_id
            return None

        if key == "Escape":
            self.cancel()
            return DropResult(order=self.get_order())

        if self.source != DragSource.KEYBOARD:
            return None

        if key in ("ArrowUp", "ArrowDown"):
            order = self.get_order()
            if self.over_id in order:
                index = order.index(self.over_id) + (-1 if key == "ArrowUp" else 1)
                index = max(0, min(index, len(order) - 1))
                self.over_id = order[index]
            return None

        if key in PICK_UP_KEYS:
            return self._drop()
        return None

    def cancel(self):
        if self.phase != DragPhase.IDLE:
            logger.debug(f"Drag cancelled for {self.active_id}")
        self._reset()

    def _drop(self) -> DropResult:
        order = self.get_order()
        active_id, over_id = self.active_id, self.over_id
        self._reset()

        if over_id is None or active_id not in order or over_id not in order:
            return DropResult(order=order, active_id=active_id)
        if active_id == over_id:
            return DropResult(order=order, active_id=active_id)

        new_order = array_move(order, order.index(active_id), order.index(over_id))
        committed = self.commit(new_order)
        return DropResult(
            committed=committed,
            order=new_order if committed else order,
            active_id=active_id,
        )
