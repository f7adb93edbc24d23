import logging
from typing import List, Optional, Tuple

import chess

from arbor.core.board import GameStatus, mating_color, status
from arbor.core.evaluator import Evaluator
from arbor.core.node import SearchError, SearchNode

_log = logging.getLogger(__name__)

# Python ints never overflow; keeping the sentinels symmetric means
# -LOSS_SCORE == WIN_SCORE and every heuristic score lies strictly between.
WIN_SCORE = 1_000_000
LOSS_SCORE = -WIN_SCORE
DRAW_SCORE = 0


class InvariantViolation(SearchError):
    """The tree or the position contradicts an assumption of the search."""


class AlphaBeta:
    """Depth-bounded minimax with alpha-beta pruning over a SearchNode tree.

    The maximizing side is the evaluator's side; whether a node maximizes or
    minimizes follows from whose turn it is in that node's position.
    """

    def __init__(self, evaluator: Evaluator, order_moves: bool = False):
        self.evaluator = evaluator
        self.side = evaluator.side
        self.order_moves = order_moves
        self.nodes = 0

    def terminal_score(self, board: chess.Board) -> Optional[int]:
        """Score of a finished game, or None while it is ongoing."""
        state = status(board)
        if state is GameStatus.STALEMATE:
            return DRAW_SCORE
        if state is GameStatus.CHECKMATE:
            return WIN_SCORE if mating_color(board) == self.side else LOSS_SCORE
        return None

    def search(
        self,
        node: SearchNode,
        depth: int,
        alpha: int = LOSS_SCORE,
        beta: int = WIN_SCORE,
    ) -> Tuple[int, Optional[SearchNode]]:
        """Return (score, best child) for `node` searched `depth` plies deep.

        The best child is None at leaves and finished games. The node's
        `score` and `best_move` are updated with the result.
        """
        self.nodes += 1

        final = self.terminal_score(node.board)
        if final is not None:
            node.children = []
            node.score = final
            node.best_move = None
            return final, None

        if depth <= 0:
            return node.static_score, None

        children = node.expand(self.evaluator)
        if not children:
            raise InvariantViolation(f"Ongoing position without legal moves: {node.board.fen()}")

        maximize = node.board.turn == self.side
        best_value = None
        best_move = None
        best_child = None

        for move, child in self._visit_order(children, maximize):
            value, _ = self.search(child, depth - 1, alpha, beta)
            if maximize:
                if best_child is None or value > best_value:
                    best_value, best_move, best_child = value, move, child
                    alpha = max(alpha, value)
                    if alpha >= beta:
                        break
            else:
                if best_child is None or value < best_value:
                    best_value, best_move, best_child = value, move, child
                    beta = min(beta, value)
                    if beta <= alpha:
                        break

        node.score = best_value
        node.best_move = best_move
        return best_value, best_child

    def _visit_order(self, children, maximize: bool):
        if not self.order_moves:
            return children
        # sorted() is stable, so equal scores keep generation order
        return sorted(children, key=lambda pair: pair[1].static_score, reverse=maximize)


def principal_variation(node: SearchNode, max_len: int = 64) -> List[chess.Move]:
    """Follow the best moves recorded by the latest search through `node`."""
    pv = []
    current = node
    while current.best_move is not None and len(pv) < max_len:
        nxt = current.child(current.best_move)
        if nxt is None:
            break
        pv.append(current.best_move)
        current = nxt
    return pv
