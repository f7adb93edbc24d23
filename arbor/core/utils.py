from arbor.core.search import WIN_SCORE


def format_info(depth, score, nodes, elapsed, pv_moves, move=None):
    """One-line search report; `elapsed` is in seconds."""
    pv_str = " ".join(m.uci() for m in pv_moves) or "-"
    nps = int(nodes / elapsed) if elapsed > 0 else 0

    if abs(score) >= WIN_SCORE:
        score_str = "mate won" if score > 0 else "mate lost"
    else:
        score_str = f"score {score}"

    prefix = f"move {move.uci()} " if move is not None else ""
    return f"{prefix}depth {depth} {score_str} nodes {nodes} nps {nps} time {int(elapsed * 1000)}ms pv {pv_str}"
