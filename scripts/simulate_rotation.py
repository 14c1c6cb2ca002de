#!/usr/bin/env python3
"""Simulate the rotation over the library.

Runs the next-track engine for a number of rounds in incognito mode (no
statistics are changed) and prints how often each track came up. Useful to
check what the current filter and probability settings do to a library.

Usage:
    ./scripts/simulate_rotation.py [--rounds N] [--seed SEED] [--fraction FRACTION]
"""

import argparse
import logging
import random
import sqlite3
import sys
from collections import Counter
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from playnext.config import config
from playnext.engine import Engine
from playnext.store import load_tracks

logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def simulate(engine: Engine, rounds: int, fraction: float) -> Counter:
    """Play `rounds` tracks back to back and count the picks."""
    plays = Counter()

    for _ in range(rounds):
        track = engine.advance()
        if track is None:
            logger.warning("No qualified songs left; stopping early")
            break

        engine.mark_playing(track)
        engine.record_played(track, fraction)
        engine.sync()
        plays[track] += 1

    return plays


def main() -> int:
    parser = argparse.ArgumentParser(description="Simulate the track rotation")
    parser.add_argument("--rounds", type=int, default=1000, help="Tracks to play (default: 1000)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed (default: PLAYNEXT_RNG_SEED)")
    parser.add_argument("--fraction", type=float, default=1.0, help="Played fraction of every track")
    parser.add_argument("--top", type=int, default=20, help="Tracks to list (default: 20)")
    args = parser.parse_args()

    db_path = config.paths.db_path
    if not db_path.exists():
        logger.error(f"Database not found: {db_path}")
        return 1

    conn = sqlite3.connect(str(db_path))
    try:
        tracks = load_tracks(conn, check_files=True)
    finally:
        conn.close()

    kwargs = {}
    if args.seed is not None:
        kwargs["rng"] = random.Random(args.seed)

    engine = Engine.from_config(config, tracks, **kwargs)
    engine.incognito = True

    plays = simulate(engine, args.rounds, args.fraction)
    total = sum(plays.values())

    print(f"Library: {len(tracks)} tracks, {len(plays)} played at least once")
    print(f"Rounds: {total}")
    print("=" * 70)
    for track, count in plays.most_common(args.top):
        print(f"{count:6d}  {100.0 * count / total:5.1f}%  {track.display_name}")

    never = [track for track in tracks if track not in plays]
    if never:
        print(f"\nNever played: {len(never)} tracks")

    return 0


if __name__ == "__main__":
    sys.exit(main())
