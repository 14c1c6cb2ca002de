#!/usr/bin/env python3
"""Record a play or skip for one track.

Called by the player when a track stops playing. Updates the track's
statistics and the saved play history.

Usage:
    ./scripts/record_play.py <file_path> [--fraction FRACTION] [--skip-score]

    --fraction: Portion of the track that was played, 0.0-1.0 (default: 1.0)
    --skip-score: Leave the score alone (e.g. playback failed)

Exit codes:
    0: Play recorded
    1: Unknown track or database error
"""

import argparse
import logging
import sqlite3
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from playnext.config import config
from playnext.engine import Engine
from playnext.store import load_history, load_tracks, save_history, save_statistics

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout),
    ],
)
logger = logging.getLogger(__name__)


def record_play(db_path: Path, history_file: Path, file_path: str, fraction: float, skip_score: bool) -> bool:
    """Apply one play event and persist the result.

    Returns:
        True if the track was found and the event applied
    """
    conn = sqlite3.connect(str(db_path))
    try:
        tracks = load_tracks(conn)
        track = next((item for item in tracks if item.path == file_path), None)
        if track is None:
            logger.error(f"Track not found in database: {file_path}")
            return False

        history = load_history(history_file, tracks)
        engine = Engine.from_config(config, tracks, history=history)

        engine.record_played(track, fraction, skip_score_update=skip_score)

        save_statistics(conn, [track])
        save_history(history_file, engine.history)

        logger.info(
            f"Recorded play: {track.display_name} "
            f"(score={track.score:.1f}, plays={track.play_count}, skips={track.skip_count})"
        )
        return True
    finally:
        conn.close()


def main() -> int:
    parser = argparse.ArgumentParser(description="Record a play or skip for one track")
    parser.add_argument("file_path", help="Path of the track as stored in the library")
    parser.add_argument(
        "--fraction",
        type=float,
        default=1.0,
        help="Portion of the track that was played, 0.0-1.0 (default: 1.0)",
    )
    parser.add_argument(
        "--skip-score",
        action="store_true",
        help="Do not update the score",
    )
    args = parser.parse_args()

    if not 0.0 <= args.fraction <= 1.0:
        logger.error(f"Played fraction must be between 0.0 and 1.0, got {args.fraction}")
        return 1

    try:
        ok = record_play(
            config.paths.db_path,
            config.paths.history_file,
            args.file_path,
            args.fraction,
            args.skip_score,
        )
    except sqlite3.Error as e:
        logger.error(f"Database error: {e}")
        return 1

    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
