"""Lazily expanded search tree reused between turns.

A SearchNode owns a private copy of its position, the static score computed
when the node was created, and the score written back by the latest search.
Children are generated on demand:

    children is None   -> not expanded yet
    children == []     -> terminal position (no legal moves)

Nodes keep no parent links. Locating the position actually reached after a
move (`find`) returns a subtree that is detached from everything else, so the
rest of the old tree is reclaimed once the caller drops the old root.
"""
from __future__ import annotations

import logging
from collections import deque
from typing import List, Optional, Tuple

import chess

from arbor.core.board import successors
from arbor.core.evaluator import Evaluator

_log = logging.getLogger(__name__)


class SearchError(RuntimeError):
    """Fatal failure inside the search core."""


class CacheMissError(SearchError):
    """The realized position is not reachable from the cached tree."""


class SearchNode:
    __slots__ = ("board", "static_score", "score", "children", "best_move")

    def __init__(self, board: chess.Board, static_score: int):
        self.board = board
        self.static_score = static_score
        self.score = static_score
        self.children: Optional[List[Tuple[chess.Move, SearchNode]]] = None
        self.best_move: Optional[chess.Move] = None

    # Pickling support for the process pool (slots have no __dict__).
    def __getstate__(self):
        return (self.board, self.static_score, self.score, self.children, self.best_move)

    def __setstate__(self, state):
        self.board, self.static_score, self.score, self.children, self.best_move = state

    def __repr__(self):
        expanded = "?" if self.children is None else len(self.children)
        return f"SearchNode({self.board.fen()!r}, score={self.score}, children={expanded})"

    @classmethod
    def lazy(cls, board: chess.Board, evaluator: Evaluator) -> "SearchNode":
        """Create an unexpanded node for `board` with its static score."""
        board = board.copy(stack=False)
        return cls(board, evaluator.evaluate(board))

    @classmethod
    def analyze(cls, board: chess.Board, evaluator: Evaluator) -> "SearchNode":
        """Create a node and expand it one ply."""
        node = cls.lazy(board, evaluator)
        node.expand(evaluator)
        return node

    @property
    def is_expanded(self) -> bool:
        return self.children is not None

    def expand(self, evaluator: Evaluator) -> List[Tuple[chess.Move, "SearchNode"]]:
        """Generate children once; later calls return the cached list."""
        if self.children is None:
            self.children = [
                (move, SearchNode(child, evaluator.evaluate(child)))
                for move, child in successors(self.board)
            ]
        return self.children

    def child(self, move: chess.Move) -> Optional["SearchNode"]:
        for child_move, node in self.children or ():
            if child_move == move:
                return node
        return None

    def find(self, target: chess.Board, evaluator: Evaluator, max_depth: int = 4) -> "SearchNode":
        """Breadth-first search for the node whose position equals `target`.

        Nodes on the way are expanded lazily; already expanded ones are reused
        as they are. Raises CacheMissError when `target` is not within
        `max_depth` plies of this node.
        """
        if self.board == target:
            return self
        queue = deque([(self, 0)])
        visited = 0
        while queue:
            node, depth = queue.popleft()
            if depth >= max_depth:
                continue
            # siblings are checked before any of them gets expanded
            for _, child in node.expand(evaluator):
                visited += 1
                if child.board == target:
                    _log.debug("Found position at ply %d after %d nodes", depth + 1, visited)
                    return child
                queue.append((child, depth + 1))
        raise CacheMissError(
            f"Position {target.fen()} not found within {max_depth} plies of {self.board.fen()}"
        )

    def size(self) -> int:
        """Number of nodes in this subtree."""
        count = 0
        stack = [self]
        while stack:
            node = stack.pop()
            count += 1
            if node.children:
                stack.extend(child for _, child in node.children)
        return count
