"""Core engine components: rules adapter, evaluator, search tree, alpha-beta and root parallel search."""

from .board import ChessBoard, GameStatus
from .evaluator import Evaluator
from .node import CacheMissError, SearchError, SearchNode
from .parallel import RootParallelizer
from .search import DRAW_SCORE, LOSS_SCORE, WIN_SCORE, AlphaBeta, InvariantViolation, principal_variation
