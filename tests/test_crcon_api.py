"""Tests for the CRCON API calls."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from custom_tools.afk_tracker import ActivityStats
from custom_tools.crcon_api import CrconApi


def make_response(json_data=None, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.text = str(json_data)
    response.json.return_value = json_data
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(
            f"{status_code} Error", response=response
        )
    return response


@pytest.fixture
def api():
    return CrconApi("https://rcon.example.com/", "secret", timeout=3)


class TestGetDetailedPlayers:
    def test_players(self, api):
        data = {
            "result": {
                "players": {
                    "p1": {"player_id": "p1", "name": "First", "kills": 1},
                    "p2": {"player_id": "p2", "name": "Second", "is_vip": True},
                }
            }
        }
        with patch("custom_tools.crcon_api.requests.get", return_value=make_response(data)) as mock_get:
            players = api.get_detailed_players()

        mock_get.assert_called_once_with(
            "https://rcon.example.com/api/get_detailed_players",
            headers={"Authorization": "Bearer secret"},
            timeout=3,
        )
        assert [player.player_id for player in players] == ["p1", "p2"]
        assert players[0].stats == ActivityStats(kills=1)
        assert players[1].is_vip is True

    def test_record_without_player_id_is_skipped(self, api):
        data = {"result": {"players": {"p1": {"player_id": "p1", "name": "First"}, "x": {"name": "Ghost"}}}}
        with patch("custom_tools.crcon_api.requests.get", return_value=make_response(data)):
            players = api.get_detailed_players()

        assert [player.player_id for player in players] == ["p1"]

    @pytest.mark.parametrize(
        "data",
        [None, [], {}, {"result": None}, {"result": {}}, {"result": {"players": []}}],
    )
    def test_unexpected_structure(self, api, data):
        with patch("custom_tools.crcon_api.requests.get", return_value=make_response(data)):
            assert api.get_detailed_players() == []

    def test_http_error(self, api):
        with patch("custom_tools.crcon_api.requests.get", return_value=make_response({"error": "nope"}, 401)):
            assert api.get_detailed_players() == []

    def test_connection_error(self, api):
        with patch("custom_tools.crcon_api.requests.get", side_effect=requests.ConnectionError("down")):
            assert api.get_detailed_players() == []

    def test_invalid_json(self, api):
        response = make_response()
        response.json.side_effect = ValueError("Expecting value")
        with patch("custom_tools.crcon_api.requests.get", return_value=response):
            assert api.get_detailed_players() == []


class TestKick:
    def test_kick(self, api):
        with patch("custom_tools.crcon_api.requests.post", return_value=make_response({"result": True})) as mock_post:
            api.kick("p1", "First", "AFK", "CRCON_afk_kick")

        mock_post.assert_called_once_with(
            "https://rcon.example.com/api/kick",
            json={"player_id": "p1", "player_name": "First", "reason": "AFK", "by": "CRCON_afk_kick"},
            headers={"Authorization": "Bearer secret"},
            timeout=3,
        )

    def test_kick_refused(self, api):
        with patch("custom_tools.crcon_api.requests.post", return_value=make_response({}, 500)):
            with pytest.raises(requests.HTTPError):
                api.kick("p1", "First", "AFK", "CRCON_afk_kick")
