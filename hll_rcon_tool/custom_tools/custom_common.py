"""
custom_common.py

Common tools and parameters set for HLL CRCON custom plugins
(see : https://github.com/MarechJ/hll_rcon_tool)

Source : https://github.com/ElGuillermo

Feel free to use/modify/distribute, as long as you keep this note in your code
"""

import logging
from typing import Optional
import discord  # type: ignore
from discord.errors import HTTPException
from requests.exceptions import RequestException


# Translations
# key : english, french, german
# ----------------------------------------------

TRANSL = {
    "afk_kick": ["Kicking AFK player", "Expulsion d'un joueur AFK", "AFK-Spieler wird gekickt"],
    "afk_kick_failed": ["Failed to kick AFK player", "Échec de l'expulsion du joueur AFK", "AFK-Spieler konnte nicht gekickt werden"],
}


def afk_kick_message(
    player_name: str,
    player_id: str,
    lang: int = 0,
    key: str = "afk_kick"
) -> str:
    """
    Returns the human readable line announcing an AFK kick
    ie : "Kicking AFK player : Some Name (76561198000000000)"
    """
    return f"{TRANSL[key][lang]} : {player_name} ({player_id})"


class DiscordNotifier:
    """
    Posts plain messages to a Discord channel webhook
    Sending is best effort : failures are logged, never raised
    """

    def __init__(self, webhook_url: Optional[str], bot_name: Optional[str] = None):
        self.webhook_url = webhook_url
        self.bot_name = bot_name
        self._webhook = None

    def _get_webhook(self) -> discord.SyncWebhook:
        if self._webhook is None:
            self._webhook = discord.SyncWebhook.from_url(self.webhook_url)
        return self._webhook

    def send(self, message: str) -> bool:
        logger = logging.getLogger(__name__)
        if not self.webhook_url:
            logger.info("Discord webhook not set, skipping send.")
            return False
        kwargs = {"content": message}
        if self.bot_name:
            kwargs["username"] = self.bot_name
        try:
            self._get_webhook().send(**kwargs)
            return True
        except ValueError as error:
            logger.error("Invalid Discord webhook url : %s", error)
        except (HTTPException, RequestException, ConnectionError):
            logger.exception("Error sending to Discord")
        return False
