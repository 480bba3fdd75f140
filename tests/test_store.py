"""
Tests for the board store: schema values, the reduction and id generators.
"""
import pytest

from taskboard.config import ConfigError
from taskboard.schema import (
    Board,
    Task,
    Lane,
    UnknownLane,
    AddTask,
    MoveTask,
    DeleteTask,
    EditTask,
)
from taskboard.store import (
    BoardStore,
    UnknownCommand,
    CounterIdGenerator,
    ClockIdGenerator,
    UuidIdGenerator,
    make_id_generator,
)


def ids(tasks):
    return [t.id for t in tasks]


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Schema Tests
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_lane_from_str():
    """Wire names map to lanes; anything else fails fast"""
    assert Lane.from_str("todo") is Lane.TODO
    assert Lane.from_str("inProgress") is Lane.IN_PROGRESS
    assert Lane.from_str(Lane.DONE) is Lane.DONE

    with pytest.raises(UnknownLane):
        Lane.from_str("in-progress")
    with pytest.raises(ValueError):
        Lane.from_str("archive")


def test_lane_titles():
    assert [lane.title for lane in Lane] == ["To Do", "In Progress", "Done"]


def test_board_is_immutable(abc_board):
    """with_lane returns a new board and leaves the original alone"""
    updated = abc_board.with_lane(Lane.DONE, [Task("d", "D")])
    assert ids(updated.done) == ["d"]
    assert abc_board.done == ()
    with pytest.raises(Exception):
        abc_board.todo = ()


def test_board_queries(abc_board):
    assert abc_board.count() == 4
    assert abc_board.find("x") == Task("x", "X")
    assert abc_board.find("x", Lane.TODO) is None
    assert abc_board.lane_of("b") is Lane.TODO
    assert abc_board.lane_of("missing") is None


def test_board_serialization(abc_board):
    data = abc_board.to_dict()
    assert list(data) == ["todo", "inProgress", "done"]
    assert data["inProgress"] == [{"id": "x", "text": "X"}]
    assert data["todo"][0] == {"id": "a", "text": "A"}


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# AddTask / EditTask / DeleteTask
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_add_appends_to_todo(store, abc_board):
    """New tasks go to the end of To Do; other lanes untouched"""
    board = store.apply(abc_board, AddTask("D"))
    assert ids(board.todo) == ["a", "b", "c", "1"]
    assert board.todo[-1].text == "D"
    assert board.in_progress == abc_board.in_progress
    assert board.done == abc_board.done


def test_add_stores_text_verbatim(store):
    board = store.apply(Board.empty(), AddTask("  padded  "))
    assert board.todo[0].text == "  padded  "


def test_add_skips_colliding_ids():
    """A generated id already on the board is never reused"""
    store = BoardStore(CounterIdGenerator())
    board = Board(todo=(Task("1", "taken"), Task("2", "also taken")))
    board = store.apply(board, AddTask("new"))
    assert ids(board.todo) == ["1", "2", "3"]


def test_add_then_edit(store):
    """Editing keeps the id and replaces the text"""
    board = store.apply(Board.empty(), AddTask("buy milk"))
    new_id = board.todo[0].id
    board = store.apply(board, EditTask(new_id, Lane.TODO, "buy milk and eggs"))
    assert board.todo == (Task(new_id, "buy milk and eggs"),)
    assert board.count() == 1


def test_edit_unknown_id_is_noop(store, abc_board):
    assert store.apply(abc_board, EditTask("zzz", Lane.TODO, "new")) == abc_board
    # Right id, wrong lane
    assert store.apply(abc_board, EditTask("x", Lane.TODO, "new")) == abc_board


def test_delete_removes_task(store, abc_board):
    board = store.apply(abc_board, DeleteTask("b", Lane.TODO))
    assert ids(board.todo) == ["a", "c"]
    assert board.in_progress == abc_board.in_progress


def test_delete_is_idempotent(store, abc_board):
    once = store.apply(abc_board, DeleteTask("b", Lane.TODO))
    twice = store.apply(once, DeleteTask("b", Lane.TODO))
    assert once == twice


def test_unknown_command_rejected(store, abc_board):
    with pytest.raises(UnknownCommand):
        store.apply(abc_board, {"type": "ADD_TASK"})


def test_invalid_lane_fails_fast(store, abc_board):
    with pytest.raises(UnknownLane):
        store.apply(abc_board, DeleteTask("a", "backlog"))


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# MoveTask
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestMoveTask:
    """Placement rules for same-lane and cross-lane moves."""

    def test_same_lane_inserts_before_target(self, store, abc_board):
        a = abc_board.todo[0]
        board = store.apply(abc_board, MoveTask(a, Lane.TODO, Lane.TODO, target_id="c"))
        assert ids(board.todo) == ["b", "a", "c"]

    def test_same_lane_move_up(self, store, abc_board):
        c = abc_board.todo[2]
        board = store.apply(abc_board, MoveTask(c, Lane.TODO, Lane.TODO, target_id="a"))
        assert ids(board.todo) == ["c", "a", "b"]

    def test_same_lane_without_target_moves_to_end(self, store, abc_board):
        a = abc_board.todo[0]
        board = store.apply(abc_board, MoveTask(a, Lane.TODO, Lane.TODO))
        assert ids(board.todo) == ["b", "c", "a"]

    def test_same_lane_onto_itself_moves_to_end(self, store, abc_board):
        """The card is gone from the working copy, so its own id is not found"""
        b = abc_board.todo[1]
        board = store.apply(abc_board, MoveTask(b, Lane.TODO, Lane.TODO, target_id="b"))
        assert ids(board.todo) == ["a", "c", "b"]

    def test_cross_lane_appends_even_with_target(self, store, abc_board):
        a = abc_board.todo[0]
        board = store.apply(abc_board, MoveTask(a, Lane.TODO, Lane.IN_PROGRESS, target_id="x"))
        assert ids(board.todo) == ["b", "c"]
        assert ids(board.in_progress) == ["x", "a"]

    def test_cross_lane_to_empty_lane(self, store, abc_board):
        x = abc_board.in_progress[0]
        board = store.apply(abc_board, MoveTask(x, Lane.IN_PROGRESS, Lane.DONE))
        assert board.in_progress == ()
        assert ids(board.done) == ["x"]

    def test_move_does_not_change_task(self, store, abc_board):
        a = abc_board.todo[0]
        board = store.apply(abc_board, MoveTask(a, Lane.TODO, Lane.DONE))
        assert board.done[0] is a

    def test_move_conserves_count(self, store, abc_board):
        board = abc_board
        moves = [
            MoveTask(Task("a", "A"), Lane.TODO, Lane.DONE),
            MoveTask(Task("x", "X"), Lane.IN_PROGRESS, Lane.TODO, target_id="b"),
            MoveTask(Task("c", "C"), Lane.TODO, Lane.TODO, target_id="b"),
            MoveTask(Task("a", "A"), Lane.DONE, Lane.IN_PROGRESS),
        ]
        for move in moves:
            board = store.apply(board, move)
            assert board.count() == abc_board.count()

    def test_task_missing_from_source_is_still_placed(self, store, abc_board):
        """The store trusts the caller's Task value"""
        ghost = Task("g", "Ghost")
        board = store.apply(abc_board, MoveTask(ghost, Lane.DONE, Lane.IN_PROGRESS))
        assert ids(board.in_progress) == ["x", "g"]
        assert ids(board.todo) == ["a", "b", "c"]

    def test_never_duplicates_in_target(self, store, abc_board):
        """A wrong from-lane cannot leave two copies in the destination"""
        x = abc_board.in_progress[0]
        board = store.apply(abc_board, MoveTask(x, Lane.TODO, Lane.IN_PROGRESS))
        assert ids(board.in_progress) == ["x"]

    def test_repeated_move_settles(self, store, abc_board):
        a = abc_board.todo[0]
        cmd = MoveTask(a, Lane.TODO, Lane.TODO, target_id="c")
        once = store.apply(abc_board, cmd)
        twice = store.apply(once, cmd)
        assert ids(twice.todo) == ids(once.todo) == ["b", "a", "c"]

    def test_input_board_untouched(self, store, abc_board):
        before = abc_board.to_dict()
        store.apply(abc_board, MoveTask(abc_board.todo[0], Lane.TODO, Lane.DONE))
        assert abc_board.to_dict() == before


def test_ids_unique_across_command_sequence(store):
    """No id appears twice on the board after any sequence of commands"""
    board = Board.empty()
    for text in ["one", "two", "three", "four"]:
        board = store.apply(board, AddTask(text))
    t1, t2, t3, t4 = board.todo
    sequence = [
        MoveTask(t1, Lane.TODO, Lane.IN_PROGRESS),
        MoveTask(t2, Lane.TODO, Lane.IN_PROGRESS, target_id=t1.id),
        MoveTask(t2, Lane.IN_PROGRESS, Lane.IN_PROGRESS, target_id=t1.id),
        MoveTask(t3, Lane.TODO, Lane.DONE),
        EditTask(t4.id, Lane.TODO, "FOUR"),
        AddTask("five"),
        DeleteTask(t3.id, Lane.DONE),
        MoveTask(t1, Lane.IN_PROGRESS, Lane.DONE),
    ]
    for cmd in sequence:
        board = store.apply(board, cmd)
        all_ids = board.task_ids()
        assert len(all_ids) == len(set(all_ids))
    assert ids(board.in_progress) == [t2.id]
    assert ids(board.done) == [t1.id]


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Id generators
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_counter_ids():
    gen = CounterIdGenerator(start=5)
    assert [gen(), gen(), gen()] == ["5", "6", "7"]


def test_clock_ids_use_milliseconds():
    gen = ClockIdGenerator(clock=lambda: 1700000000.5)
    assert gen() == "1700000000500"


def test_clock_ids_unique_when_clock_stalls():
    """Same millisecond (or a clock stepping back) falls back to +1"""
    readings = iter([1.0, 1.0, 0.5, 2.0])
    gen = ClockIdGenerator(clock=lambda: next(readings))
    assert [gen(), gen(), gen(), gen()] == ["1000", "1001", "1002", "2000"]


def test_uuid_ids():
    gen = UuidIdGenerator()
    first, second = gen(), gen()
    assert len(first) == 32
    assert first != second


def test_make_id_generator():
    assert isinstance(make_id_generator("counter"), CounterIdGenerator)
    assert isinstance(make_id_generator("clock"), ClockIdGenerator)
    assert isinstance(make_id_generator("uuid"), UuidIdGenerator)
    with pytest.raises(ConfigError):
        make_id_generator("snowflake")
