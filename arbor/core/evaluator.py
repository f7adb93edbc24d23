"""Material + mobility evaluator, scored for one fixed side."""

from typing import Dict, Optional

import chess
from arbor.config import CONFIG


class Evaluator:
    def __init__(self, side: chess.Color = chess.BLACK, piece_values: Optional[Dict[str, int]] = None):
        self.side = side
        values = piece_values if piece_values is not None else CONFIG.eval.piece_values
        self.values = {pt: values[chess.piece_name(pt).upper()] for pt in chess.PIECE_TYPES}
        self.calls = 0

    def evaluate(self, board: chess.Board) -> int:
        """Return the static score, positive favors `self.side`.

        Mobility only counts moves of the side to move, so it contributes
        nothing when the opponent is on move. Terminal positions are scored
        by the search and never reach this method.
        """
        self.calls += 1
        mobility = 0
        for move in board.legal_moves:
            if board.color_at(move.from_square) == self.side:
                mobility += 1

        material = 0
        for piece in board.piece_map().values():
            value = self.values[piece.piece_type]
            material += value if piece.color == self.side else -value

        return mobility + material
