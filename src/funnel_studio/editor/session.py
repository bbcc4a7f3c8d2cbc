"""The editing session: sole owner and mutator of a funnel document.

Each mutation computes the step's new element order, dynamic content and
blocks first and swaps them in with plain assignments, then hands the
materialized step to the persistence collaborator without waiting for it.
"""

import copy
import functools
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple, Any

from ..core.config import EditorConfig
from ..core.step_registry import (
    StepIntent,
    StepType,
    is_intent_locked,
    is_valid_intent,
    validate_funnel_structure,
)
from ..errors import FunnelStudioError, UnknownStepError, UploadError
from ..models import Funnel, Step, new_step_id
from ..notifications import Notifier
from . import content_blocks
from . import element_order
from .canvas import CanvasElement, editor_elements
from .content_blocks import BlockType, ContentBlock
from .design import ResolvedDesign, resolve_button_text, resolve_design
from .drag_reorder import DragActivation, DragReorderEngine
from .dynamic_content import BUILT_IN_COPY_KINDS, BUILT_IN_ELEMENT_IDS, ElementKind, new_element_id
from .element_order import current_order
from .inline_editor import InlineTextEditor
from .selection import Selection, SelectionKind, panel_for

logger = logging.getLogger(__name__)

# Built-in text slots and the content field they edit
TEXT_FIELDS = {
    "headline": "headline",
    "subtext": "subtext",
    "button": "button_text",
}


def _synchronized(method):
    """Run a session method under the session lock."""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)
    return wrapper


class EditingSession:
    """Applies editor actions to a funnel and keeps the selection valid."""

    def __init__(
        self,
        funnel: Funnel,
        sink=None,
        uploader=None,
        notifier: Optional[Notifier] = None,
        config: Optional[EditorConfig] = None,
        async_persistence: bool = True,
    ):
        self.funnel = funnel
        self.sink = sink
        self.uploader = uploader
        self.notifier = notifier or Notifier()
        self.config = config or EditorConfig()
        self.async_persistence = async_persistence
        self.selection = Selection.funnel()
        self._editors: Dict[Tuple[str, str], InlineTextEditor] = {}
        self._lock = threading.RLock()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._last_dispatch: Optional[Future] = None

    # Lookups

    def step(self, step_id: str) -> Step:
        step = self.funnel.get_step(step_id)
        if step is None:
            raise UnknownStepError(step_id)
        return step

    def element_order(self, step_id: str) -> List[str]:
        return current_order(self.step(step_id))

    def resolved_design(self, step_id: str) -> ResolvedDesign:
        return resolve_design(self.step(step_id).design, self.funnel.settings)

    def canvas(self, step_id: str) -> List[CanvasElement]:
        return editor_elements(self.step(step_id), self.funnel.settings, self.selection)

    def structure_warnings(self) -> List[str]:
        return validate_funnel_structure(self.funnel.ordered_steps())

    # Selection

    @_synchronized
    def select(self, selection: Selection):
        self.selection = selection
        logger.debug(f"Selected {selection.kind.value} {selection.compound_id}")

    def select_funnel(self):
        self.select(Selection.funnel())

    def select_step(self, step_id: str):
        self.select(Selection.step(step_id))

    def select_element(self, step_id: str, element_id: str):
        self.select(Selection.element(step_id, element_id))

    def select_block(self, step_id: str, block_id: str):
        self.select(Selection.block(step_id, block_id))

    def select_compound(self, kind: SelectionKind, compound_id: str):
        self.select(Selection.from_compound(kind, compound_id))

    def active_panel(self) -> Tuple[str, Optional[str]]:
        """Sidebar tab and section for the current selection."""
        selection = self.selection
        is_dynamic = False
        if selection.kind == SelectionKind.ELEMENT:
            step = self.funnel.get_step(selection.step_id)
            is_dynamic = step is not None and selection.child_id not in BUILT_IN_ELEMENT_IDS
        if selection.kind == SelectionKind.BLOCK:
            step = self.funnel.get_step(selection.step_id)
            if step is not None and not content_blocks.shows_structure_panel(step):
                return ("behavior", None)
        return panel_for(selection, is_dynamic)

    # Persistence

    def _commit(self, step: Step):
        step.updated_at = datetime.now()
        if self.sink is None:
            return
        payload = step.to_dict()
        self._dispatch(lambda: self.sink.save_step(self.funnel.id, payload), f"save step {step.id}")

    def _dispatch(self, action: Callable[[], None], description: str):
        """Hand a sink call to the persistence worker.

        Calls run one at a time in commit order, so the sink sees every
        committed version of a step and the last one wins.
        """
        def run():
            try:
                action()
            except FunnelStudioError as e:
                logger.error(f"Could not {description}: {e}")
                self.notifier.notify_error("Changes not saved", str(e))
            except Exception as e:
                logger.exception(f"Unexpected failure to {description}")
                self.notifier.notify_error("Changes not saved", str(e))

        if not self.async_persistence:
            run()
            return
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="funnel-persist")
            self._last_dispatch = self._executor.submit(run)

    def wait_for_persistence(self, timeout: Optional[float] = None):
        """Block until every sink call dispatched so far has finished."""
        with self._lock:
            pending = self._last_dispatch
        if pending is not None:
            pending.result(timeout=timeout)

    def close(self):
        """Flush open editors, then drain and stop the persistence worker."""
        with self._lock:
            editors = list(self._editors.values())
        for editor in editors:
            editor.close()
        with self._lock:
            self._editors.clear()
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)

    # Steps

    @_synchronized
    def add_step(self, step_type: StepType, index: Optional[int] = None) -> Step:
        step = Step.create(step_type)
        step_ids = list(self.funnel.step_ids)
        step_ids.insert(len(step_ids) if index is None else index, step.id)
        self.funnel.steps[step.id] = step
        self.funnel.step_ids = step_ids
        logger.info(f"Added {step_type.value} step {step.id}")
        self._commit(step)
        self.select_step(step.id)
        return step

    @_synchronized
    def remove_step(self, step_id: str) -> bool:
        """Delete a step with its elements, blocks and dynamic content."""
        if step_id not in self.funnel.steps:
            return False
        # Flush open editors while the step still exists
        for key in [k for k in self._editors if k[0] == step_id]:
            self._editors[key].close()
            del self._editors[key]
        self.funnel.step_ids = [sid for sid in self.funnel.step_ids if sid != step_id]
        del self.funnel.steps[step_id]
        if self.selection.step_id == step_id:
            self.select_funnel()
        logger.info(f"Removed step {step_id}")
        if self.sink is not None:
            self._dispatch(lambda: self.sink.delete_step(self.funnel.id, step_id), f"delete step {step_id}")
        return True

    @_synchronized
    def duplicate_step(self, step_id: str) -> Optional[Step]:
        source = self.funnel.get_step(step_id)
        if source is None:
            return None
        clone = Step.from_dict(copy.deepcopy(source.to_dict()))
        clone.id = new_step_id()
        clone.content_blocks = [
            ContentBlock(content_blocks.new_block_id(), b.type, dict(b.content))
            for b in clone.content_blocks
        ]
        # Dynamic ids stay unique within the funnel
        id_map = {
            old_id: new_element_id(clone.dynamic_elements.kind_of(old_id))
            for old_id in clone.dynamic_elements
        }
        store = clone.dynamic_elements
        for old_id, new_id in id_map.items():
            store = store.duplicate(old_id, new_id).delete(old_id)
        clone.dynamic_elements = store
        clone.element_order = [id_map.get(eid, eid) for eid in clone.element_order]
        step_ids = list(self.funnel.step_ids)
        step_ids.insert(step_ids.index(step_id) + 1, clone.id)
        self.funnel.steps[clone.id] = clone
        self.funnel.step_ids = step_ids
        logger.info(f"Duplicated step {step_id} as {clone.id}")
        self._commit(clone)
        return clone

    @_synchronized
    def reorder_steps(self, new_ids: List[str]) -> bool:
        if not element_order.is_permutation(self.funnel.step_ids, new_ids):
            logger.warning(f"Rejected step reorder: {self.funnel.step_ids} -> {new_ids}")
            return False
        self.funnel.step_ids = list(new_ids)
        return True

    def step_drag_engine(self) -> DragReorderEngine:
        return self._drag_engine(lambda: list(self.funnel.step_ids), self.reorder_steps)

    def _drag_engine(self, get_order, commit) -> DragReorderEngine:
        activation = DragActivation(
            distance=self.config.drag_activation_distance,
            delay_ms=self.config.drag_activation_delay_ms,
        )
        return DragReorderEngine(get_order, commit, activation)

    # Step content

    @_synchronized
    def update_content(self, step_id: str, field_name: str, value: Any) -> None:
        step = self.step(step_id)
        step.content = {**step.content, field_name: value}
        self._commit(step)

    @_synchronized
    def set_intent(self, step_id: str, intent: StepIntent) -> bool:
        step = self.step(step_id)
        if is_intent_locked(step.step_type) or not is_valid_intent(step.step_type, intent):
            logger.warning(f"Intent {intent.value} not allowed for {step.step_type.value} step {step_id}")
            return False
        self.update_content(step_id, "intent", intent.value)
        return True

    @_synchronized
    def update_design(self, step_id: str, partial: Dict[str, Any]) -> ResolvedDesign:
        step = self.step(step_id)
        step.design = step.design.merged(partial)
        self._commit(step)
        return resolve_design(step.design, self.funnel.settings)

    # Elements

    @_synchronized
    def add_element(self, step_id: str, kind: ElementKind) -> str:
        """Append a dynamic element with default content and select it."""
        step = self.step(step_id)
        new_order, element_id = element_order.append(current_order(step), kind)
        store = step.dynamic_elements.create(kind, element_id)
        step.element_order, step.dynamic_elements = new_order, store
        logger.info(f"Added {kind.value} element {element_id} to step {step_id}")
        self._commit(step)
        self.select_element(step_id, element_id)
        return element_id

    @_synchronized
    def move_element_up(self, step_id: str, element_id: str) -> bool:
        return self._replace_order(step_id, element_order.move_up(self.element_order(step_id), element_id))

    @_synchronized
    def move_element_down(self, step_id: str, element_id: str) -> bool:
        return self._replace_order(step_id, element_order.move_down(self.element_order(step_id), element_id))

    @_synchronized
    def reorder_elements(self, step_id: str, new_order: List[str]) -> bool:
        """Commit a drag result; anything but a permutation is rejected."""
        order = self.element_order(step_id)
        if not element_order.is_permutation(order, new_order):
            element_order.reorder(order, new_order)
            return False
        return self._replace_order(step_id, element_order.reorder(order, new_order))

    def _replace_order(self, step_id: str, new_order: List[str]) -> bool:
        step = self.step(step_id)
        if new_order == current_order(step):
            return False
        step.element_order = new_order
        self._commit(step)
        return True

    @_synchronized
    def duplicate_element(self, step_id: str, element_id: str) -> Optional[str]:
        """Insert an independent copy right after the element."""
        step = self.step(step_id)
        order = current_order(step)
        if element_id not in order:
            logger.warning(f"Cannot duplicate {element_id}: not in step {step_id}")
            return None

        kind = step.dynamic_elements.kind_of(element_id) or ElementKind.from_element_id(element_id)
        if kind is not None:
            new_order, new_id = element_order.duplicate(order, element_id)
            if element_id in step.dynamic_elements:
                store = step.dynamic_elements.duplicate(element_id, new_id)
            else:
                store = step.dynamic_elements.create(kind, new_id)
        elif element_id in BUILT_IN_COPY_KINDS:
            kind = BUILT_IN_COPY_KINDS[element_id]
            new_order, new_id = element_order.duplicate(order, element_id)
            store = step.dynamic_elements.create(kind, new_id).set(new_id, self._built_in_payload(step, element_id))
        else:
            logger.warning(f"Element {element_id} cannot be duplicated")
            return None

        step.element_order, step.dynamic_elements = new_order, store
        logger.info(f"Duplicated {element_id} as {new_id} in step {step_id}")
        self._commit(step)
        return new_id

    def _built_in_payload(self, step: Step, element_id: str) -> Dict[str, Any]:
        if element_id == "button":
            return {"text": resolve_button_text(step.content, self.funnel.settings)}
        if element_id == "video":
            return {"video_url": step.content.get("video_url", "")}
        return {"text": step.content.get(element_id, "")}

    @_synchronized
    def remove_element(self, step_id: str, element_id: str) -> bool:
        """Remove from the order and purge its dynamic content in one step."""
        step = self.step(step_id)
        order = current_order(step)
        if element_id not in order:
            return False

        editor = self._editors.get((step_id, element_id))
        if editor is not None:
            editor.close()
            del self._editors[(step_id, element_id)]

        step.element_order = element_order.remove(current_order(step), element_id)
        step.dynamic_elements = step.dynamic_elements.delete(element_id)
        if self.selection.kind == SelectionKind.ELEMENT and self.selection.targets(step_id, element_id):
            self.select_step(step_id)
        logger.info(f"Removed element {element_id} from step {step_id}")
        self._commit(step)
        return True

    @_synchronized
    def update_element_content(self, step_id: str, element_id: str, partial: Dict[str, Any]) -> bool:
        step = self.step(step_id)
        if element_id not in step.dynamic_elements and ElementKind.from_element_id(element_id) is None:
            logger.warning(f"Element {element_id} has no dynamic content")
            return False
        step.dynamic_elements = step.dynamic_elements.set(element_id, partial)
        self._commit(step)
        return True

    def element_drag_engine(self, step_id: str) -> DragReorderEngine:
        return self._drag_engine(
            lambda: self.element_order(step_id),
            lambda new_order: self.reorder_elements(step_id, new_order),
        )

    def upload_element_image(self, step_id: str, element_id: str, data: bytes, filename: str) -> str:
        """Upload an image and store only its URL on the element."""
        if self.uploader is None:
            raise UploadError("No uploader configured")
        step = self.step(step_id)
        url = self.uploader.upload(data, filename)
        if element_id in ("image_top", "image_bottom"):
            position = "top" if element_id == "image_top" else "bottom"
            self.update_design(step_id, {"image_url": url, "image_position": position})
        elif step.dynamic_elements.kind_of(element_id) == ElementKind.IMAGE:
            self.update_element_content(step_id, element_id, {"image_url": url})
        else:
            self.update_design(step_id, {"image_url": url})
        return url

    # Inline text editing

    @_synchronized
    def text_editor(self, step_id: str, element_id: str, scheduler=None) -> InlineTextEditor:
        """Editor bound to a text-bearing element; saves flow back into the step."""
        key = (step_id, element_id)
        if key in self._editors:
            return self._editors[key]

        step = self.step(step_id)
        if element_id in TEXT_FIELDS:
            field_name = TEXT_FIELDS[element_id]
            value = step.content.get(field_name, "")

            def save(html: str):
                self.update_content(step_id, field_name, html)
        else:
            kind = step.dynamic_elements.kind_of(element_id)
            if kind not in (ElementKind.TEXT, ElementKind.HEADLINE, ElementKind.BUTTON):
                raise ValueError(f"Element {element_id} is not text-bearing")
            value = step.dynamic_elements.get(element_id, kind).get("text", "")

            def save(html: str):
                self.update_element_content(step_id, element_id, {"text": html})

        def on_save(html: str):
            # Debounced saves may arrive on a timer thread after the editor was dropped
            with self._lock:
                if self._editors.get(key) is not editor:
                    logger.debug(f"Dropped save for closed editor {element_id}")
                    return
                save(html)

        editor = InlineTextEditor(element_id, value, on_save, self.config, scheduler)
        self._editors[key] = editor
        return editor

    @_synchronized
    def sync_editors(self, step_id: str):
        """Push the stored text of a step into its idle editors."""
        step = self.step(step_id)
        for (sid, element_id), editor in self._editors.items():
            if sid != step_id:
                continue
            if element_id in TEXT_FIELDS:
                editor.sync(step.content.get(TEXT_FIELDS[element_id], ""))
            else:
                editor.sync(step.dynamic_elements.get(element_id).get("text", ""))

    # Content blocks

    @_synchronized
    def add_block(self, step_id: str, block_type: BlockType) -> str:
        step = self.step(step_id)
        step.content_blocks = content_blocks.add(step.content_blocks, block_type)
        block_id = step.content_blocks[-1].id
        self._commit(step)
        self.select_block(step_id, block_id)
        return block_id

    @_synchronized
    def update_block(self, step_id: str, block_id: str, content: Dict[str, Any]) -> bool:
        step = self.step(step_id)
        if content_blocks.find(step.content_blocks, block_id) is None:
            return False
        step.content_blocks = content_blocks.update(step.content_blocks, block_id, content)
        self._commit(step)
        return True

    @_synchronized
    def remove_block(self, step_id: str, block_id: str) -> bool:
        step = self.step(step_id)
        if content_blocks.find(step.content_blocks, block_id) is None:
            return False
        step.content_blocks = content_blocks.remove(step.content_blocks, block_id)
        if self.selection.kind == SelectionKind.BLOCK and self.selection.targets(step_id, block_id):
            self.select_step(step_id)
        self._commit(step)
        return True

    @_synchronized
    def reorder_blocks(self, step_id: str, new_ids: List[str]) -> bool:
        step = self.step(step_id)
        current_ids = [b.id for b in step.content_blocks]
        if not element_order.is_permutation(current_ids, new_ids):
            content_blocks.reorder(step.content_blocks, new_ids)
            return False
        step.content_blocks = content_blocks.reorder(step.content_blocks, new_ids)
        self._commit(step)
        return True

    def block_drag_engine(self, step_id: str) -> DragReorderEngine:
        return self._drag_engine(
            lambda: [b.id for b in self.step(step_id).content_blocks],
            lambda new_ids: self.reorder_blocks(step_id, new_ids),
        )
