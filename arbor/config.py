# arbor/config.py
import logging
import os
import tomllib
from dataclasses import dataclass, field
from typing import Dict

_log = logging.getLogger(__name__)

# Material weights in pawns. The king is weighted heavily so the heuristic
# never trades it away; mates are scored by the search, not by material.
PIECE_VALUES = {
    "PAWN": 1,
    "KNIGHT": 3,
    "BISHOP": 3,
    "ROOK": 5,
    "QUEEN": 9,
    "KING": 200,
}


def _default_workers() -> int:
    cores = os.cpu_count() or 2
    return max(1, cores - 1)


@dataclass
class SearchConfig:
    depth: int = 3  # plies searched below each root move
    workers: int = field(default_factory=_default_workers)
    find_depth: int = 4  # how far the cache is walked to locate a position
    order_moves: bool = False


@dataclass
class EvalConfig:
    piece_values: Dict[str, int] = field(default_factory=lambda: PIECE_VALUES.copy())


@dataclass
class EngineConfig:
    side: str = "black"


@dataclass
class Config:
    search: SearchConfig = field(default_factory=SearchConfig)
    eval: EvalConfig = field(default_factory=EvalConfig)
    engine: EngineConfig = field(default_factory=EngineConfig)
    log_level: str = "INFO"

    @staticmethod
    def load_from_toml(path: str = "config.toml") -> "Config":
        cfg = Config()
        if not os.path.exists(path):
            return cfg
        with open(path, "rb") as f:
            raw = tomllib.load(f)
        for section in ("search", "eval", "engine"):
            target = getattr(cfg, section)
            for k, v in raw.get(section, {}).items():
                if not hasattr(target, k):
                    _log.warning("Unknown config key %s.%s ignored", section, k)
                    continue
                if k == "piece_values":
                    # partial tables only override the pieces they name
                    merged = target.piece_values.copy()
                    merged.update({name.upper(): int(val) for name, val in v.items()})
                    v = merged
                setattr(target, k, v)
        if "log_level" in raw:
            cfg.log_level = raw["log_level"]
        return cfg


def apply_env_overrides(cfg: Config) -> Config:
    """Apply ARBOR_SEARCH_DEPTH on top of a loaded config."""
    override_depth = os.environ.get("ARBOR_SEARCH_DEPTH")
    if override_depth:
        try:
            depth = int(override_depth)
        except ValueError:
            _log.warning("Ignoring ARBOR_SEARCH_DEPTH=%r: not an integer", override_depth)
            return cfg
        if depth < 0:
            _log.warning("Ignoring ARBOR_SEARCH_DEPTH=%r: depth must be non-negative", override_depth)
        else:
            cfg.search.depth = depth
    return cfg


# single globally importable config instance
CONFIG = apply_env_overrides(
    Config.load_from_toml(os.environ.get("ARBOR_CONFIG_TOML", "config.toml"))
)
