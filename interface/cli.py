"""Play a game against the engine in the terminal."""

import argparse
import logging
import os

from arbor.config import CONFIG, Config, apply_env_overrides
from arbor.main import Engine


def _parse_log_level(name):
    return getattr(logging, (name or "INFO").upper(), logging.INFO)


def _non_negative_int(value):
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="arbor-play", description="Play chess against the Arbor engine.")
    p.add_argument("--config", help="TOML config file (default: $ARBOR_CONFIG_TOML or config.toml)")
    p.add_argument("--depth", type=_non_negative_int, help="plies searched below each root move")
    p.add_argument("--side", choices=["white", "black"], help="side played by the engine")
    p.add_argument("--workers", type=int, help="worker processes for the root search")
    p.add_argument("--fen", help="start from this position instead of the initial one")
    return p


def play(engine: Engine, input_fn=input, output_fn=print) -> str:
    """Run the game loop until it ends or the player quits. Returns the result string."""
    board = engine.board
    while not board.is_game_over():
        output_fn(board)
        output_fn("----------------------------")

        if engine.is_engine_turn():
            move = engine.play_engine_move()
            output_fn(f"Engine plays: {move.uci()} | Eval: {engine.last_score}")
            continue

        user_move = input_fn("Enter your move (uci format, e2e4), or 'quit': ").strip()
        if user_move in ("quit", "exit"):
            return "aborted"
        if not engine.make_move(user_move):
            output_fn("Illegal move, try again.")

    output_fn(board)
    output_fn("Game Over")
    result = board.board.result(claim_draw=False)
    winner = board.winner()
    if winner is None:
        output_fn(f"Result: {result} (stalemate)")
    else:
        output_fn(f"Result: {result} ({'engine' if winner == engine.side else 'player'} wins)")
    return result


def main(argv=None, input_fn=input, output_fn=print) -> int:
    args = build_parser().parse_args(argv)
    cfg = CONFIG
    if args.config:
        cfg = apply_env_overrides(Config.load_from_toml(args.config))
        if not os.path.exists(args.config):
            output_fn(f"Config file {args.config} not found, using defaults.")

    logging.basicConfig(level=_parse_log_level(cfg.log_level),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    engine = Engine(depth=args.depth, side=args.side, workers=args.workers, fen=args.fen, config=cfg)
    try:
        play(engine, input_fn=input_fn, output_fn=output_fn)
    finally:
        engine.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
