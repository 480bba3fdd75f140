# Task board: ordered three-lane board, drag/drop coordination, JSON server
#
# Components:
#   schema.py  - Data model (Task, Lane, Board, DragSession, PendingDeletion, commands)
#   store.py   - BoardStore reduction and id generators
#   session.py - BoardContext (state + subscribers) and InteractionSession (gestures)
#   config.py  - YAML configuration
#   server.py  - Flask JSON adapter

from .schema import (
    Task,
    Lane,
    Board,
    DragSession,
    PendingDeletion,
    AddTask,
    MoveTask,
    DeleteTask,
    EditTask,
    UnknownLane,
)
from .store import BoardStore, UnknownCommand, make_id_generator
from .session import BoardContext, InteractionSession

__version__ = "0.1.0"
