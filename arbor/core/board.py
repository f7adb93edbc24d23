"""Rules adapter over python-chess plus a board wrapper with move history."""

import enum
from typing import Iterator, Optional, Tuple

import chess


class GameStatus(enum.Enum):
    ONGOING = "ongoing"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"


def status(board: chess.Board) -> GameStatus:
    """Classify a position. Draws by rule (repetition, 50 moves) count as ongoing."""
    if board.is_checkmate():
        return GameStatus.CHECKMATE
    if board.is_stalemate():
        return GameStatus.STALEMATE
    return GameStatus.ONGOING


def successors(board: chess.Board) -> Iterator[Tuple[chess.Move, chess.Board]]:
    """Yield (move, resulting position) in generation order.

    The resulting boards are fresh stack-less copies; `board` is left untouched.
    """
    for move in board.legal_moves:
        child = board.copy(stack=False)
        child.push(move)
        yield move, child.copy(stack=False)


def mating_color(board: chess.Board) -> chess.Color:
    """Color of the side delivering mate, read off the pieces giving check."""
    checkers = board.checkers()
    if not checkers:
        raise ValueError(f"Position is not check: {board.fen()}")
    square = next(iter(checkers))
    return board.color_at(square)


class ChessBoard:
    def __init__(self, fen: Optional[str] = None):
        """Initialize from FEN or the standard starting position."""
        self.board = chess.Board(fen) if fen else chess.Board()
        self.move_history = []

    def reset(self, fen: Optional[str] = None):
        """Reset to the initial position (or to `fen`)."""
        if fen:
            self.board.set_fen(fen)
        else:
            self.board.reset()
        self.move_history.clear()

    def get_fen(self) -> str:
        return self.board.fen()

    def parse_move(self, move_str: str) -> Optional[chess.Move]:
        """Return the legal move for a UCI string, or None."""
        try:
            move = chess.Move.from_uci(move_str)
        except ValueError:
            return None
        if move not in self.board.legal_moves:
            return None
        return move

    def make_move(self, move_str: str) -> bool:
        """Push a UCI move (e.g. 'e2e4'). Returns True if legal."""
        move = self.parse_move(move_str)
        if move is None:
            return False
        self.push(move)
        return True

    def push(self, move: chess.Move):
        self.board.push(move)
        self.move_history.append(move.uci())

    def get_legal_moves(self):
        """Return legal moves as UCI strings."""
        return [m.uci() for m in self.board.legal_moves]

    def status(self) -> GameStatus:
        return status(self.board)

    def is_game_over(self) -> bool:
        return self.status() is not GameStatus.ONGOING

    def winner(self) -> Optional[chess.Color]:
        if self.status() is GameStatus.CHECKMATE:
            return mating_color(self.board)
        return None

    def __str__(self):
        return str(self.board)
