"""
Task board schema: tasks, lanes, the board value and the command set.

Lanes:
  todo → inProgress → done  (any lane may move to any other)

Every value here is frozen. A command never edits a Board in place;
the store returns a new Board instead.
"""
from enum import Enum
from dataclasses import dataclass
from typing import Optional, Tuple, Dict, Any, Iterator


class UnknownLane(ValueError):
    """Raised when a lane name is not one of the three fixed lanes."""
    pass


class Lane(Enum):
    """The three fixed board lanes (values are the wire names)."""
    TODO = "todo"
    IN_PROGRESS = "inProgress"
    DONE = "done"

    @property
    def title(self) -> str:
        return LANE_TITLES[self]

    @classmethod
    def from_str(cls, value) -> "Lane":
        if isinstance(value, Lane):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnknownLane(
                f"Unknown lane: {value!r}. "
                f"Valid lanes: {[lane.value for lane in cls]}"
            ) from None


LANE_TITLES: Dict[Lane, str] = {
    Lane.TODO: "To Do",
    Lane.IN_PROGRESS: "In Progress",
    Lane.DONE: "Done",
}


@dataclass(frozen=True)
class Task:
    """A single card on the board."""
    id: str
    text: str

    def with_text(self, text: str) -> "Task":
        return Task(id=self.id, text=text)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "text": self.text}


@dataclass(frozen=True)
class Board:
    """
    Ordered task sequences for the three lanes.

    Lane order is display order. A task id appears at most once across
    the whole board.
    """
    todo: Tuple[Task, ...] = ()
    in_progress: Tuple[Task, ...] = ()
    done: Tuple[Task, ...] = ()

    @classmethod
    def empty(cls) -> "Board":
        return cls()

    def lane(self, lane: Lane) -> Tuple[Task, ...]:
        return getattr(self, _LANE_FIELDS[Lane.from_str(lane)])

    def with_lane(self, lane: Lane, tasks) -> "Board":
        """Return a copy of the board with one lane replaced."""
        values = {name: getattr(self, name) for name in _LANE_FIELDS.values()}
        values[_LANE_FIELDS[Lane.from_str(lane)]] = tuple(tasks)
        return Board(**values)

    def lanes(self) -> Iterator[Tuple[Lane, Tuple[Task, ...]]]:
        for lane in Lane:
            yield lane, self.lane(lane)

    def find(self, task_id: str, lane: Optional[Lane] = None) -> Optional[Task]:
        """Find a task by id, optionally restricted to one lane."""
        search = [Lane.from_str(lane)] if lane is not None else list(Lane)
        for current in search:
            for task in self.lane(current):
                if task.id == task_id:
                    return task
        return None

    def lane_of(self, task_id: str) -> Optional[Lane]:
        for lane, tasks in self.lanes():
            if any(t.id == task_id for t in tasks):
                return lane
        return None

    def task_ids(self) -> list:
        return [t.id for _, tasks in self.lanes() for t in tasks]

    def count(self) -> int:
        return sum(len(tasks) for _, tasks in self.lanes())

    def to_dict(self) -> Dict[str, Any]:
        return {lane.value: [t.to_dict() for t in tasks] for lane, tasks in self.lanes()}


_LANE_FIELDS: Dict[Lane, str] = {
    Lane.TODO: "todo",
    Lane.IN_PROGRESS: "in_progress",
    Lane.DONE: "done",
}


@dataclass(frozen=True)
class DragSession:
    """The card being dragged and the card currently hovered as a drop target."""
    dragged_task_id: Optional[str] = None
    hover_task_id: Optional[str] = None

    @property
    def active(self) -> bool:
        return self.dragged_task_id is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dragged_task_id": self.dragged_task_id,
            "hover_task_id": self.hover_task_id,
        }


@dataclass(frozen=True)
class PendingDeletion:
    """A task dropped on the trash, waiting for confirmation."""
    task: Task
    lane: Lane

    def to_dict(self) -> Dict[str, Any]:
        return {"task": self.task.to_dict(), "lane": self.lane.value}


# ── Commands ────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class AddTask:
    text: str


@dataclass(frozen=True)
class MoveTask:
    """Move a task between (or within) lanes.

    The full Task value travels with the command; the store does not look
    it up by id.
    """
    task: Task
    from_lane: Lane
    to_lane: Lane
    target_id: Optional[str] = None


@dataclass(frozen=True)
class DeleteTask:
    task_id: str
    from_lane: Lane


@dataclass(frozen=True)
class EditTask:
    task_id: str
    from_lane: Lane
    new_text: str


COMMAND_TYPES = (AddTask, MoveTask, DeleteTask, EditTask)
