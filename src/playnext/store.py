"""Library database and history state persistence."""

import json
import logging
import sqlite3
from pathlib import Path
from typing import Iterable, Optional

import fasteners

from .history import PlayHistory
from .track import Track, TrackStatus

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS tracks (
    id TEXT PRIMARY KEY,
    path TEXT NOT NULL UNIQUE,
    title TEXT,
    artist TEXT,
    album_artist TEXT,
    rating INTEGER NOT NULL DEFAULT 0,
    score REAL NOT NULL DEFAULT 50.0,
    play_count INTEGER NOT NULL DEFAULT 0,
    skip_count INTEGER NOT NULL DEFAULT 0,
    last_played INTEGER NOT NULL DEFAULT 0
)
"""


def create_schema(conn: sqlite3.Connection) -> None:
    conn.execute(SCHEMA)
    conn.commit()


def insert_track(conn: sqlite3.Connection, track: Track) -> None:
    """Insert track record into database.

    Args:
        conn: SQLite database connection
        track: Track to store, statistics included

    Raises:
        ValueError: If a track with the same path already exists
        sqlite3.IntegrityError: If database constraints violated
    """
    cursor = conn.cursor()

    try:
        cursor.execute(
            """
            INSERT INTO tracks (
                id, path, title, artist, album_artist,
                rating, score, play_count, skip_count, last_played
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                track.track_id,
                track.path,
                track.title,
                track.artist,
                track.album_artist,
                track.rating,
                track.score,
                track.play_count,
                track.skip_count,
                track.last_played,
            ),
        )
        conn.commit()
    except sqlite3.IntegrityError as e:
        if "UNIQUE constraint failed: tracks.path" in str(e):
            raise ValueError(f"Track already exists at path: {track.path}") from e
        raise


def load_tracks(conn: sqlite3.Connection, check_files: bool = False) -> list[Track]:
    """Load the whole library.

    Args:
        conn: SQLite database connection
        check_files: Mark tracks whose file no longer exists as missing

    Returns:
        Tracks ordered by path
    """
    cursor = conn.cursor()
    cursor.execute(
        """
        SELECT id, path, title, artist, album_artist,
               rating, score, play_count, skip_count, last_played
        FROM tracks ORDER BY path
        """
    )

    tracks = []
    for row in cursor.fetchall():
        track = Track(
            track_id=row[0],
            path=row[1],
            title=row[2],
            artist=row[3],
            album_artist=row[4],
            rating=row[5],
            score=row[6],
            play_count=row[7],
            skip_count=row[8],
            last_played=row[9],
        )
        if check_files and not Path(track.path).exists():
            track.status = TrackStatus.MISSING
            logger.warning(f"File not found for {track.display_name}: {track.path}")
        tracks.append(track)

    logger.info(f"Loaded {len(tracks)} tracks")
    return tracks


def save_statistics(conn: sqlite3.Connection, tracks: Iterable[Track]) -> int:
    """Write the statistics of the given tracks back to the database.

    Returns:
        Number of rows updated
    """
    cursor = conn.cursor()
    updated = 0

    for track in tracks:
        cursor.execute(
            """
            UPDATE tracks
            SET rating = ?, score = ?, play_count = ?, skip_count = ?, last_played = ?
            WHERE id = ?
            """,
            (
                track.rating,
                track.score,
                track.play_count,
                track.skip_count,
                track.last_played,
                track.track_id,
            ),
        )
        updated += cursor.rowcount

    conn.commit()
    logger.debug(f"Saved statistics of {updated} tracks")
    return updated


def save_history(path: Path, history: PlayHistory) -> None:
    """Snapshot the history lists to a JSON file.

    Args:
        path: State file (a sibling .lock file guards concurrent writers)
        history: History to save
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    state = {
        "previously_played": [track.track_id for track in history.previously_played],
        "recent_artists": list(history.recent_artists),
        "upcoming": [track.track_id for track in history.upcoming],
        "queue": [track.track_id for track in history.queue],
    }

    lock = fasteners.InterProcessLock(path.with_suffix('.lock'))
    with lock:
        # Write atomically through a temporary file
        temp_file = path.with_suffix('.tmp')
        with open(temp_file, 'w') as f:
            json.dump(state, f, indent=2)
        temp_file.replace(path)

    logger.info(f"Saved play history ({len(state['previously_played'])} played, {len(state['queue'])} queued)")


def load_history(
    path: Path,
    tracks: Iterable[Track],
    history: Optional[PlayHistory] = None
) -> PlayHistory:
    """Rebuild history state from a JSON snapshot.

    Ids that no longer match a library track are dropped. A missing, empty or
    corrupted file gives an empty history.

    Args:
        path: State file written by save_history
        tracks: Library to resolve track ids against
        history: History to fill (a new one if omitted)

    Returns:
        The restored history
    """
    if history is None:
        history = PlayHistory()

    if not path.exists() or path.stat().st_size == 0:
        logger.info(f"No saved history at {path}")
        return history

    lock = fasteners.InterProcessLock(path.with_suffix('.lock'))
    with lock:
        try:
            with open(path, 'r') as f:
                state = json.load(f)
        except (json.JSONDecodeError, ValueError):
            # File is corrupted, start fresh
            logger.warning(f"Corrupted history file {path}, starting fresh")
            return history

    if not isinstance(state, dict):
        logger.warning(f"Unexpected history state in {path}, starting fresh")
        return history

    by_id = {track.track_id: track for track in tracks}

    def resolve(ids):
        found = [by_id[track_id] for track_id in ids if track_id in by_id]
        if len(found) < len(ids):
            logger.debug(f"Dropped {len(ids) - len(found)} unknown track ids from saved history")
        return found

    history.reset()
    history.restore(resolve(state.get("previously_played", [])))

    # Saved artists also cover tracks that have since left the library
    saved_artists = state.get("recent_artists")
    if saved_artists is not None:
        history.recent_artists[:] = [int(value) for value in saved_artists if value]
        history.trim()

    for track in resolve(state.get("upcoming", [])):
        history.add_upcoming(track)
    for track in resolve(state.get("queue", [])):
        history.add_to_queue(track)

    return history
