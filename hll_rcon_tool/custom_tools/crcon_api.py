"""
crcon_api.py

A plugin for HLL CRCON (https://github.com/MarechJ/hll_rcon_tool)
that kicks the players who stay AFK for too long.

Source : https://github.com/ElGuillermo

Feel free to use/modify/distribute, as long as you keep this note in your code
"""

import logging
import requests  # type: ignore
from requests.exceptions import RequestException

from custom_tools.afk_kick_config import HTTP_TIMEOUT_SECS
from custom_tools.afk_tracker import PlayerSnapshot, player_from_record


logger = logging.getLogger(__name__)


def log_response_error(error: RequestException) -> None:
    """
    Logs the HTTP status and body of a failed request, if there was an answer
    """
    if error.response is not None:
        logger.error("Response status : %s", error.response.status_code)
        logger.error("Response data : %s", error.response.text)


class CrconApi:
    """
    Calls the CRCON HTTP API, authenticated by an API key
    """

    def __init__(self, base_url: str, api_key: str, timeout: float = HTTP_TIMEOUT_SECS):
        self.base_url = f"{base_url.rstrip('/')}/api"
        self.headers = {"Authorization": f"Bearer {api_key}"}
        self.timeout = timeout

    def get_detailed_players(self) -> list[PlayerSnapshot]:
        """
        Returns the connected players
        Any failure or unexpected answer gives an empty list
        """
        url = f"{self.base_url}/get_detailed_players"
        try:
            response = requests.get(url, headers=self.headers, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except RequestException as error:
            logger.error("Error fetching detailed players : %s", error)
            log_response_error(error)
            return []
        except ValueError as error:
            logger.error("Error decoding detailed players : %s", error)
            return []

        result = data.get("result") if isinstance(data, dict) else None
        players = result.get("players") if isinstance(result, dict) else None
        if not isinstance(players, dict):
            logger.warning("Unexpected API response structure : %s", data)
            return []

        players_list = []
        for record in players.values():
            player = player_from_record(record)
            if player is None:
                logger.warning("Ignoring a player record without player_id : %s", record)
                continue
            players_list.append(player)

        logger.info("Fetched %s players", len(players_list))
        return players_list

    def kick(self, player_id: str, player_name: str, reason: str, by: str) -> None:
        """
        Kicks a player
        Raises a RequestException if the CRCON couldn't be reached or refused it
        """
        url = f"{self.base_url}/kick"
        data = {
            "player_id": player_id,
            "player_name": player_name,
            "reason": reason,
            "by": by,
        }
        response = requests.post(url, json=data, headers=self.headers, timeout=self.timeout)
        response.raise_for_status()
