"""Win/loss/draw tallies keyed by player id."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union
import json
import logging
import threading

from .game import Outcome


logger = logging.getLogger(__name__)

RESULTS = ("win", "loss", "draw")


@dataclass
class LeaderboardEntry:
    player_id: str
    username: str
    wins: int = 0
    losses: int = 0
    draws: int = 0


def result_for(outcome: Outcome, player: str = "X") -> str:
    """Map a finished game's outcome to ``player``'s result."""
    if not outcome.is_terminal:
        raise ValueError("Game is still in progress")
    if outcome is Outcome.DRAW:
        return "draw"
    return "win" if outcome.winner == player else "loss"


class Leaderboard:
    """In-memory tallies, optionally mirrored to a JSON file.

    Only the counters are stored; individual games are not kept.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None) -> None:
        self._path = Path(path) if path else None
        self._entries: Dict[str, LeaderboardEntry] = {}
        self._lock = threading.Lock()
        if self._path is not None:
            self._load(self._path)

    def record(self, player_id: str, username: str, result: str) -> LeaderboardEntry:
        if result not in RESULTS:
            raise ValueError(
                f"Unknown result {result!r}. Choose one of {', '.join(RESULTS)}."
            )
        with self._lock:
            entry = self._entries.get(player_id)
            if entry is None:
                entry = LeaderboardEntry(player_id=player_id, username=username)
                self._entries[player_id] = entry
            else:
                entry.username = username
            if result == "win":
                entry.wins += 1
            elif result == "loss":
                entry.losses += 1
            else:
                entry.draws += 1
            if self._path is not None:
                self._save(self._path)
            logger.info("Recorded %s for %s (%s)", result, player_id, username)
            return LeaderboardEntry(**asdict(entry))

    def get(self, player_id: str) -> Optional[LeaderboardEntry]:
        with self._lock:
            entry = self._entries.get(player_id)
            return LeaderboardEntry(**asdict(entry)) if entry else None

    def standings(self) -> List[LeaderboardEntry]:
        """Entries ordered by wins, most first."""
        with self._lock:
            entries = [LeaderboardEntry(**asdict(e)) for e in self._entries.values()]
        return sorted(entries, key=lambda e: e.wins, reverse=True)

    # ---- persistence ----

    def _load(self, path: Path) -> None:
        if not path.exists():
            return
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            entries = [LeaderboardEntry(**raw) for raw in data]
        except (ValueError, TypeError):
            # Keep the unreadable file for inspection and start from zero.
            backup = path.with_name(path.name + ".corrupt")
            logger.exception(
                "Unreadable leaderboard file %s; moved to %s", path, backup
            )
            path.replace(backup)
            return
        for entry in entries:
            self._entries[entry.player_id] = entry
        logger.info("Loaded %d leaderboard entries from %s", len(entries), path)

    def _save(self, path: Path) -> None:
        payload = [asdict(e) for e in self._entries.values()]
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
