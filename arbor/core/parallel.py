"""Root-parallel move selection.

Every legal root move gets its own full-depth alpha-beta search. With more
than one worker the searches run on a ProcessPoolExecutor: each task is handed
its detached child subtree, searches it, and sends the grown subtree back.
Subtrees never overlap, so the workers need no synchronization; results are
reduced only after every task has joined.
"""

import logging
import time
from concurrent.futures import ProcessPoolExecutor
from typing import List, Optional, Tuple

import chess

from arbor.core.board import GameStatus, status
from arbor.core.evaluator import Evaluator
from arbor.core.node import SearchNode
from arbor.core.search import LOSS_SCORE, WIN_SCORE, AlphaBeta, InvariantViolation, principal_variation
from arbor.core.utils import format_info

_log = logging.getLogger(__name__)


def _search_subtree(child: SearchNode, depth: int, evaluator: Evaluator, order_moves: bool):
    """Search one root move's subtree. Runs in a worker process or inline."""
    engine = AlphaBeta(evaluator, order_moves=order_moves)
    start = time.perf_counter()
    score, _ = engine.search(child, depth, LOSS_SCORE, WIN_SCORE)
    return score, child, engine.nodes, time.perf_counter() - start


class RootParallelizer:
    def __init__(self, evaluator: Evaluator, depth: int = 3, workers: int = 1,
                 find_depth: int = 4, order_moves: bool = False):
        if depth < 0:
            raise ValueError(f"Search depth must be non-negative, got {depth}")
        self.evaluator = evaluator
        self.depth = depth
        self.workers = workers
        self.find_depth = find_depth
        self.order_moves = order_moves
        self.pool: Optional[ProcessPoolExecutor] = None
        self.nodes = 0
        self.searches = 0

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.shutdown()

    def start(self):
        if self.pool is None and self.workers > 1:
            self.pool = ProcessPoolExecutor(max_workers=self.workers)

    def shutdown(self):
        if self.pool:
            self.pool.shutdown(wait=True)
            self.pool = None

    def seed(self, position: chess.Board) -> SearchNode:
        """Build the first cache for `position`."""
        return SearchNode.analyze(position, self.evaluator)

    def compute_best_move(self, position: chess.Board, cache: SearchNode) -> Tuple[chess.Move, SearchNode]:
        """Pick the engine's move in `position`, reusing `cache`.

        Returns the move and the searched subtree it leads to, which is the
        cache to pass in on the next turn.
        """
        start = time.perf_counter()
        root = cache.find(position, self.evaluator, self.find_depth)

        if root.board.turn != self.evaluator.side:
            raise InvariantViolation(f"Not the engine's turn: {root.board.fen()}")
        if status(root.board) is not GameStatus.ONGOING:
            raise InvariantViolation(f"Game is over: {root.board.fen()}")

        children = root.expand(self.evaluator)
        if not children:
            raise InvariantViolation(f"Ongoing position without legal moves: {root.board.fen()}")

        if len(children) == 1:
            move, child = children[0]
            _log.info("Only one legal move: %s", move.uci())
            return move, child

        results = self._run(children)
        self.searches += len(results)
        self.nodes = 0

        best = None
        for (move, _), (score, child, nodes, elapsed) in zip(children, results):
            self.nodes += nodes
            if _log.isEnabledFor(logging.DEBUG):
                _log.debug(format_info(self.depth, score, nodes, elapsed,
                                       principal_variation(child, self.depth), move))
            # strict comparison keeps the first of equal scores
            if best is None or score > best[0]:
                best = (score, move, child)

        score, move, child = best
        elapsed = time.perf_counter() - start
        _log.info(format_info(self.depth + 1, score, self.nodes, elapsed,
                              [move] + principal_variation(child, self.depth)))
        return move, child

    def _run(self, children: List[Tuple[chess.Move, SearchNode]]):
        self.start()
        if self.pool is None:
            return [
                _search_subtree(child, self.depth, self.evaluator, self.order_moves)
                for _, child in children
            ]
        futures = [
            self.pool.submit(_search_subtree, child, self.depth, self.evaluator, self.order_moves)
            for _, child in children
        ]
        # result() re-raises a worker's exception and fails the whole turn
        return [future.result() for future in futures]
