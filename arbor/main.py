import logging
import threading
from typing import Callable, List, Optional, Tuple

import chess

from arbor.config import CONFIG, Config
from arbor.core.board import ChessBoard
from arbor.core.evaluator import Evaluator
from arbor.core.parallel import RootParallelizer
from arbor.core.search import principal_variation

_log = logging.getLogger(__name__)


def parse_side(side: str) -> chess.Color:
    try:
        return {"white": chess.WHITE, "black": chess.BLACK}[side.lower()]
    except KeyError:
        raise ValueError(f"Unknown side {side!r}, expected 'white' or 'black'") from None


class Engine:
    """Owns the game board and the search tree between turns.

    The search itself is synchronous; `start_search` runs an engine turn on a
    background thread for callers that must not block.
    """

    def __init__(self, depth: Optional[int] = None, side: Optional[str] = None,
                 workers: Optional[int] = None, fen: Optional[str] = None,
                 config: Config = CONFIG):
        self.board = ChessBoard(fen)
        self.side = parse_side(side or config.engine.side)
        self.evaluator = Evaluator(self.side, config.eval.piece_values)
        self.search = RootParallelizer(
            self.evaluator,
            depth=depth if depth is not None else config.search.depth,
            workers=workers if workers is not None else config.search.workers,
            find_depth=config.search.find_depth,
            order_moves=config.search.order_moves,
        )
        self.cache = self.search.seed(self.board.board)
        self.last_score: Optional[int] = None

        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._error: Optional[BaseException] = None

    @property
    def depth(self) -> int:
        return self.search.depth

    def is_engine_turn(self) -> bool:
        return self.board.board.turn == self.side and not self.board.is_game_over()

    def reset(self, fen: Optional[str] = None):
        with self._lock:
            self.board.reset(fen)
            self.cache = self.search.seed(self.board.board)
            self.last_score = None

    def make_move(self, move_uci: str) -> bool:
        """Play a move for either side; the matching subtree becomes the cache."""
        with self._lock:
            move = self.board.parse_move(move_uci)
            if move is None:
                return False
            self._advance(move)
            return True

    def get_best_move(self) -> Tuple[str, int]:
        """Analyse the current position without playing the move."""
        with self._lock:
            move, subtree = self.search.compute_best_move(self.board.board, self.cache)
            return move.uci(), subtree.score

    def play_engine_move(self) -> chess.Move:
        with self._lock:
            move, subtree = self.search.compute_best_move(self.board.board, self.cache)
            self.board.push(move)
            self.cache = subtree
            self.last_score = subtree.score
            _log.info("Engine plays %s (score %s, cached nodes %d)", move.uci(), subtree.score, subtree.size())
            return move

    def principal_variation(self) -> List[chess.Move]:
        """Expected continuation from the current position."""
        return principal_variation(self.cache, self.depth)

    def start_search(self, callback: Optional[Callable[[chess.Move, int], None]] = None):
        """Play the engine's move on a background thread.

        `callback(move, score)` runs on that thread once the move is on the
        board. A failure is kept and re-raised by `wait()`.
        """
        if self._thread and self._thread.is_alive():
            return
        self._error = None

        def worker():
            try:
                move = self.play_engine_move()
            except Exception as exc:
                _log.exception("Engine search failed")
                self._error = exc
                return
            if callback:
                callback(move, self.last_score)

        self._thread = threading.Thread(target=worker, daemon=True)
        self._thread.start()

    def is_searching(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def wait(self, timeout: Optional[float] = None):
        if self._thread:
            self._thread.join(timeout=timeout)
        if self._error is not None:
            error, self._error = self._error, None
            raise error

    def close(self):
        self.wait()
        self.search.shutdown()

    def _advance(self, move: chess.Move):
        self.board.push(move)
        self.cache = self.cache.find(self.board.board, self.evaluator, self.search.find_depth)

    def print_board(self):
        print(self.board)
