"""
Interaction session: drag gestures, trash confirmation and edit mode.

The input layer (HTTP adapter, a GUI, a test) reports finished gestures
here; the session turns them into board commands and keeps the transient
state the presentation layer needs to draw highlights and the
confirmation prompt.

BoardContext owns the current values and notifies subscribers after every
change. Both components receive the same context by reference.
"""
import logging
from dataclasses import replace
from typing import Optional, Callable, Dict, Any, List

from .schema import (
    Board,
    Task,
    Lane,
    DragSession,
    PendingDeletion,
    AddTask,
    MoveTask,
    DeleteTask,
    EditTask,
)
from .store import BoardStore

logger = logging.getLogger(__name__)


class BoardContext:
    """Current board, drag and pending-deletion values plus their subscribers."""

    def __init__(self, store: Optional[BoardStore] = None, board: Optional[Board] = None):
        self.store = store or BoardStore()
        self.board: Board = board or Board.empty()
        self.drag: DragSession = DragSession()
        self.pending_deletion: Optional[PendingDeletion] = None
        self.editing_task_id: Optional[str] = None
        self.subscribers: List[Callable] = []

    def subscribe(self, callback: Callable[["BoardContext"], None]) -> None:
        """Register a callback run after every state change."""
        self.subscribers.append(callback)

    def unsubscribe(self, callback: Callable[["BoardContext"], None]) -> None:
        if callback in self.subscribers:
            self.subscribers.remove(callback)

    def _emit(self) -> None:
        for callback in list(self.subscribers):
            try:
                callback(self)
            except Exception:
                logger.exception(f"Error in subscriber {callback!r}")

    def dispatch(self, command) -> Board:
        """Apply one command to the board and notify subscribers."""
        self.board = self.store.apply(self.board, command)
        self._emit()
        return self.board

    def set_drag(self, drag: DragSession) -> None:
        if drag != self.drag:
            self.drag = drag
            self._emit()

    def set_pending_deletion(self, pending: Optional[PendingDeletion]) -> None:
        if pending != self.pending_deletion:
            self.pending_deletion = pending
            self._emit()

    def set_editing(self, task_id: Optional[str]) -> None:
        if task_id != self.editing_task_id:
            self.editing_task_id = task_id
            self._emit()

    def snapshot(self) -> Dict[str, Any]:
        """JSON-ready view of everything the presentation layer draws."""
        return {
            "board": self.board.to_dict(),
            "drag": self.drag.to_dict(),
            "pending_deletion": self.pending_deletion.to_dict() if self.pending_deletion else None,
            "editing_task_id": self.editing_task_id,
        }


class InteractionSession:
    """Translates gesture signals into BoardStore commands."""

    def __init__(self, context: Optional[BoardContext] = None):
        self.context = context or BoardContext()

    # ── read-only views ──

    @property
    def board(self) -> Board:
        return self.context.board

    @property
    def drag(self) -> DragSession:
        return self.context.drag

    @property
    def pending_deletion(self) -> Optional[PendingDeletion]:
        return self.context.pending_deletion

    @property
    def editing_task_id(self) -> Optional[str]:
        return self.context.editing_task_id

    def is_drop_indicator(self, task_id: str) -> bool:
        """True when the card should be highlighted as the drop target."""
        return self.drag.hover_task_id == task_id

    def deletion_prompt(self) -> Optional[str]:
        pending = self.pending_deletion
        if pending is None:
            return None
        return f'Are you sure you want to delete: "{pending.task.text}"'

    # ── drag gesture ──

    def begin_drag(self, task_id: str) -> None:
        if task_id == self.editing_task_id:
            logger.debug(f"drag of {task_id} ignored while editing")
            return
        # A new drag replaces any previous one, hover included
        self.context.set_drag(DragSession(dragged_task_id=task_id))

    def hover_over(self, task_id: str) -> None:
        if task_id == self.drag.dragged_task_id:
            return
        self.context.set_drag(replace(self.drag, hover_task_id=task_id))

    def clear_hover(self, task_id: str) -> None:
        if self.drag.hover_task_id == task_id:
            self.context.set_drag(replace(self.drag, hover_task_id=None))

    def cancel_drag(self) -> None:
        """Reset after a gesture that ended without a recognised drop."""
        self.context.set_drag(DragSession())

    def complete_drop_on_task(
        self,
        task: Task,
        dropped_from: Lane,
        target_lane: Lane,
        target_task_id: Optional[str],
    ) -> Board:
        """Drop onto a card: reorder within a lane, or append in another lane."""
        board = self.context.dispatch(MoveTask(
            task=task,
            from_lane=Lane.from_str(dropped_from),
            to_lane=Lane.from_str(target_lane),
            target_id=target_task_id,
        ))
        self.context.set_drag(DragSession())
        return board

    def complete_drop_on_lane(self, task: Task, dropped_from: Lane, target_lane: Lane) -> Board:
        """
        Drop onto the lane body: always appends to the end.

        Drag state is left as is; the input layer ends the gesture.
        """
        return self.context.dispatch(MoveTask(
            task=task,
            from_lane=Lane.from_str(dropped_from),
            to_lane=Lane.from_str(target_lane),
            target_id=None,
        ))

    def complete_drop_on_trash(self, task: Task, dropped_from: Lane) -> None:
        """Park the task for confirmation; the board is untouched."""
        self.context.set_pending_deletion(
            PendingDeletion(task=task, lane=Lane.from_str(dropped_from))
        )

    # ── deletion confirmation ──

    def confirm_pending_deletion(self) -> Optional[Board]:
        pending = self.pending_deletion
        if pending is None:
            return None
        board = self.context.dispatch(DeleteTask(task_id=pending.task.id, from_lane=pending.lane))
        self.context.set_pending_deletion(None)
        return board

    def cancel_pending_deletion(self) -> None:
        self.context.set_pending_deletion(None)

    # ── text entry ──

    def add_task(self, text: str) -> Optional[Task]:
        """
        Add a task to the end of To Do.

        Blank input is ignored. Non-blank text is stored exactly as typed.
        Returns the created task, or None if nothing was added.
        """
        if not text or not text.strip():
            return None
        board = self.context.dispatch(AddTask(text=text))
        return board.todo[-1]

    def begin_edit(self, task_id: str) -> None:
        self.context.set_editing(task_id)

    def end_edit(self) -> None:
        self.context.set_editing(None)

    def edit_task(self, task_id: str, lane: Lane, new_text: str) -> bool:
        """
        Submit an edit. The text is trimmed; empty or unchanged text is
        dropped without issuing a command. Edit mode ends either way.
        """
        lane = Lane.from_str(lane)
        trimmed = (new_text or "").strip()
        current = self.board.find(task_id, lane)
        issued = False
        if trimmed and current is not None and trimmed != current.text:
            self.context.dispatch(EditTask(task_id=task_id, from_lane=lane, new_text=trimmed))
            issued = True
        if self.editing_task_id == task_id:
            self.end_edit()
        return issued
