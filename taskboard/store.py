"""
Board store: the reduction that applies commands to a Board.

apply(board, command) never mutates its input. Unknown task ids degrade
to no-ops; only a non-command argument is rejected.
"""
import itertools
import logging
import time
import uuid
from typing import Callable, Optional

from .config import ConfigError
from .schema import (
    Board,
    Task,
    Lane,
    AddTask,
    MoveTask,
    DeleteTask,
    EditTask,
)

logger = logging.getLogger(__name__)

IdGenerator = Callable[[], str]


class UnknownCommand(TypeError):
    """Raised when apply() receives something that is not a board command."""
    pass


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Id generators
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class CounterIdGenerator:
    """Monotonic integer ids: "1", "2", "3", ..."""

    def __init__(self, start: int = 1):
        self._counter = itertools.count(start)

    def __call__(self) -> str:
        return str(next(self._counter))


class ClockIdGenerator:
    """
    Millisecond timestamps as ids.

    Two calls inside the same millisecond (or a clock that steps back)
    fall back to previous + 1, so ids stay unique and increasing.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or time.time
        self._last = 0

    def __call__(self) -> str:
        now = int(self._clock() * 1000)
        if now <= self._last:
            now = self._last + 1
        self._last = now
        return str(now)


class UuidIdGenerator:
    """Random 32-char hex ids."""

    def __call__(self) -> str:
        return uuid.uuid4().hex


ID_STRATEGIES = {
    "counter": CounterIdGenerator,
    "clock": ClockIdGenerator,
    "uuid": UuidIdGenerator,
}


def make_id_generator(strategy: str) -> IdGenerator:
    """Build an id generator from its config name."""
    try:
        return ID_STRATEGIES[strategy]()
    except KeyError:
        raise ConfigError(
            f"Unknown id strategy '{strategy}'. "
            f"Available: {sorted(ID_STRATEGIES)}"
        ) from None


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# BoardStore
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class BoardStore:
    """Applies AddTask / MoveTask / DeleteTask / EditTask to a Board."""

    def __init__(self, id_generator: Optional[IdGenerator] = None):
        self.id_generator = id_generator or ClockIdGenerator()

    def apply(self, board: Board, command) -> Board:
        """Return the board that results from applying one command."""
        if isinstance(command, AddTask):
            return self._add(board, command)
        if isinstance(command, MoveTask):
            return self._move(board, command)
        if isinstance(command, DeleteTask):
            return self._delete(board, command)
        if isinstance(command, EditTask):
            return self._edit(board, command)
        raise UnknownCommand(f"Not a board command: {command!r}")

    def _fresh_id(self, board: Board) -> str:
        taken = set(board.task_ids())
        task_id = self.id_generator()
        while task_id in taken:
            logger.warning(f"Id collision on {task_id}, drawing another")
            task_id = self.id_generator()
        return task_id

    def _add(self, board: Board, cmd: AddTask) -> Board:
        task = Task(id=self._fresh_id(board), text=cmd.text)
        logger.debug(f"add {task.id} to {Lane.TODO.value}")
        return board.with_lane(Lane.TODO, board.todo + (task,))

    def _move(self, board: Board, cmd: MoveTask) -> Board:
        card = cmd.task
        source = Lane.from_str(cmd.from_lane)
        dest = Lane.from_str(cmd.to_lane)

        new_source = [t for t in board.lane(source) if t.id != card.id]
        # Same lane: work on the copy that already lost the card
        target = list(new_source) if source == dest else list(board.lane(dest))
        target = [t for t in target if t.id != card.id]

        index = next(
            (i for i, t in enumerate(target) if cmd.target_id is not None and t.id == cmd.target_id),
            None,
        )
        # Cross-lane drops land at the end even when aimed at a card
        if index is None or source != dest:
            target.append(card)
            position = len(target) - 1
        else:
            target.insert(index, card)
            position = index

        logger.debug(f"move {card.id} {source.value} -> {dest.value} at {position}")
        if source == dest:
            return board.with_lane(dest, target)
        return board.with_lane(source, new_source).with_lane(dest, target)

    def _delete(self, board: Board, cmd: DeleteTask) -> Board:
        lane = Lane.from_str(cmd.from_lane)
        remaining = [t for t in board.lane(lane) if t.id != cmd.task_id]
        logger.debug(f"delete {cmd.task_id} from {lane.value}")
        return board.with_lane(lane, remaining)

    def _edit(self, board: Board, cmd: EditTask) -> Board:
        lane = Lane.from_str(cmd.from_lane)
        edited = [
            t.with_text(cmd.new_text) if t.id == cmd.task_id else t
            for t in board.lane(lane)
        ]
        logger.debug(f"edit {cmd.task_id} in {lane.value}")
        return board.with_lane(lane, edited)
