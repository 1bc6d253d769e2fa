"""Shared fixtures for the AFK kick tests."""

from unittest.mock import MagicMock

import pytest

from custom_tools.afk_kick_config import AfkKickConfig
from custom_tools.afk_tracker import ActivityStats, PlayerSnapshot


def make_config(**overrides) -> AfkKickConfig:
    values = {
        "rcon_server": "https://rcon.example.com",
        "rcon_api_key": "secret",
        "afk_time_minutes": 10,
        "vip_whitelist": True,
        "no_kick_below": 2,
        "kick_message": "AFK, please rejoin",
        "whitelist_flag": "\u2b50",
    }
    values.update(overrides)
    return AfkKickConfig(**values)


def make_player(player_id="76561198000000001", name="Soldier", stats=(0, 0, 0, 0, 0, 0), is_vip=False, flags=()):
    return PlayerSnapshot(
        player_id=player_id,
        name=name,
        is_vip=is_vip,
        flags=tuple(flags),
        stats=ActivityStats(*stats),
    )


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def api():
    """A CrconApi stand-in returning no players until told otherwise."""
    mock_api = MagicMock()
    mock_api.get_detailed_players.return_value = []
    return mock_api


@pytest.fixture
def notifier():
    return MagicMock()
