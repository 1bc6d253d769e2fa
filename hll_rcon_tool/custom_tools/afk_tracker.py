"""
afk_tracker.py

A plugin for HLL CRCON (https://github.com/MarechJ/hll_rcon_tool)
that kicks the players who stay AFK for too long.

Source : https://github.com/ElGuillermo

Feel free to use/modify/distribute, as long as you keep this note in your code
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, NamedTuple, Optional

from custom_tools.afk_kick_config import AfkKickConfig, clean_flag


logger = logging.getLogger(__name__)

STATS_FIELDS = ("kills", "deaths", "combat", "offense", "defense", "support")


class ActivityStats(NamedTuple):
    """
    The in-session counters observed for a player.
    Any change in any of them means the player did something.
    """
    kills: int = 0
    deaths: int = 0
    combat: int = 0
    offense: int = 0
    defense: int = 0
    support: int = 0


@dataclass(frozen=True)
class PlayerSnapshot:
    player_id: str
    name: str
    is_vip: bool
    flags: tuple
    stats: ActivityStats


@dataclass
class TrackedEntry:
    last_stats: ActivityStats
    since: float


class Action(Enum):
    START_TRACKING = "start"
    RESET_TRACKING = "reset"
    CONTINUE_TRACKING = "continue"
    THRESHOLD_REACHED = "threshold"


def _counter(record: dict, field: str) -> int:
    try:
        return max(int(record.get(field) or 0), 0)
    except (TypeError, ValueError):
        return 0


def player_from_record(record: dict) -> Optional[PlayerSnapshot]:
    """
    Builds a PlayerSnapshot from a get_detailed_players player record
    Returns None if the record can't identify a player
    """
    if not isinstance(record, dict):
        return None
    player_id = record.get("player_id")
    if not isinstance(player_id, str) or player_id == "":
        return None

    flags = []
    profile = record.get("profile")
    if isinstance(profile, dict):
        for flag_record in profile.get("flags") or []:
            if isinstance(flag_record, dict) and isinstance(flag_record.get("flag"), str):
                flags.append(flag_record["flag"])

    name = record.get("name")
    return PlayerSnapshot(
        player_id=player_id,
        name=name if isinstance(name, str) else "",
        is_vip=bool(record.get("is_vip")),
        flags=tuple(flags),
        stats=ActivityStats(*(_counter(record, field) for field in STATS_FIELDS)),
    )


def is_exempt(player: PlayerSnapshot, config: AfkKickConfig) -> bool:
    """
    True if the player must never be kicked :
    - a VIP, when VIP_WHITELIST is enabled
    - a player having the exact WHITELIST_FLAG in his profile
    """
    if config.vip_whitelist and player.is_vip:
        return True
    if config.whitelist_flag == "":
        return False
    return any(clean_flag(flag) == config.whitelist_flag for flag in player.flags)


class ActivityTracker:
    """
    Remembers, for every watched player, the last stats seen
    and the moment they were first seen unchanged
    """

    def __init__(self, afk_time_secs: float):
        self.afk_time_secs = afk_time_secs
        self.entries: dict[str, TrackedEntry] = {}

    def __contains__(self, player_id: str) -> bool:
        return player_id in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, player_id: str) -> Optional[TrackedEntry]:
        return self.entries.get(player_id)

    def evaluate(self, player_id: str, stats: ActivityStats, now: float) -> Action:
        entry = self.entries.get(player_id)

        # First sight : there's nothing to compare with yet
        if entry is None:
            self.entries[player_id] = TrackedEntry(last_stats=stats, since=now)
            return Action.START_TRACKING

        if stats != entry.last_stats:
            self.entries[player_id] = TrackedEntry(last_stats=stats, since=now)
            return Action.RESET_TRACKING

        if now - entry.since >= self.afk_time_secs:
            return Action.THRESHOLD_REACHED
        return Action.CONTINUE_TRACKING

    def forget(self, player_id: str) -> None:
        self.entries.pop(player_id, None)

    def prune(self, connected_ids: Iterable[str]) -> None:
        """
        Drops the disconnected players
        """
        connected_ids = set(connected_ids)
        for player_id in [pid for pid in self.entries if pid not in connected_ids]:
            logger.debug("No more tracking %s (disconnected)", player_id)
            del self.entries[player_id]
