"""
afk_kick.py

A plugin for HLL CRCON (https://github.com/MarechJ/hll_rcon_tool)
that kicks the players who stay AFK for too long.

A player is considered AFK when his kills, deaths, combat, offense, defense
and support counters didn't change at all for AFK_TIME minutes.

Source : https://github.com/ElGuillermo

Feel free to use/modify/distribute, as long as you keep this note in your code
"""

import logging
import sys
from enum import Enum
from time import monotonic, sleep
from typing import Callable
from dotenv import load_dotenv
from requests.exceptions import RequestException

from custom_tools.afk_kick_config import (
    BOT_NAME,
    KICK_MAX_ATTEMPTS,
    KICK_RETRY_DELAY_SECS,
    STARTUP_DELAY_SECS,
    WATCH_INTERVAL_SECS,
    AfkKickConfig,
    ConfigError,
    load_config,
)
from custom_tools.afk_tracker import Action, ActivityTracker, is_exempt
from custom_tools.crcon_api import CrconApi, log_response_error
from custom_tools.custom_common import DiscordNotifier, afk_kick_message


logger = logging.getLogger(__name__)


class KickResult(Enum):
    KICKED = "kicked"
    FAILED = "failed"
    INVALID_ARGUMENT = "invalid_argument"


class KickEnforcer:
    """
    Kicks a player, retrying a few times if the CRCON fails to do it
    """

    def __init__(
        self,
        api: CrconApi,
        reason: str,
        by: str = BOT_NAME,
        max_attempts: int = KICK_MAX_ATTEMPTS,
        retry_delay_secs: float = KICK_RETRY_DELAY_SECS,
        sleep_func: Callable[[float], None] = sleep,
    ):
        self.api = api
        self.reason = reason
        self.by = by
        self.max_attempts = max_attempts
        self.retry_delay_secs = retry_delay_secs
        self.sleep_func = sleep_func

    def kick(self, player_id, player_name) -> KickResult:
        if not isinstance(player_id, str) or player_id == "":
            logger.error("Invalid player_id : %r", player_id)
            return KickResult.INVALID_ARGUMENT
        if not isinstance(player_name, str) or player_name == "":
            logger.error("Invalid player_name : %r", player_name)
            return KickResult.INVALID_ARGUMENT

        for attempt in range(1, self.max_attempts + 1):
            try:
                self.api.kick(player_id, player_name, self.reason, self.by)
                logger.info("Successfully kicked player : %s (%s)", player_name, player_id)
                return KickResult.KICKED
            except RequestException as error:
                logger.error(
                    "Error kicking player %s (%s) (attempt %s/%s) : %s",
                    player_name, player_id, attempt, self.max_attempts, error
                )
                log_response_error(error)
            if attempt < self.max_attempts:
                logger.info("Retrying in %s seconds...", self.retry_delay_secs)
                self.sleep_func(self.retry_delay_secs)

        logger.error(
            "Failed to kick player %s (%s) after %s attempts",
            player_name, player_id, self.max_attempts
        )
        return KickResult.FAILED


class AfkMonitor:
    """
    Owns the watch state (tracked players, exempted players)
    and runs one watch turn at a time
    """

    def __init__(
        self,
        config: AfkKickConfig,
        api: CrconApi,
        kicker: KickEnforcer,
        notifier: DiscordNotifier,
    ):
        self.config = config
        self.api = api
        self.kicker = kicker
        self.notifier = notifier
        self.tracker = ActivityTracker(config.afk_time_secs)
        self.exempted: set[str] = set()

    def prune(self, connected_ids: set) -> None:
        self.tracker.prune(connected_ids)
        self.exempted &= connected_ids

    def run_cycle(self, now: float) -> list[str]:
        """
        Gets the players, then evaluates them one by one
        Returns the ids of the players we tried to kick
        """
        players = self.api.get_detailed_players()
        connected_ids = {player.player_id for player in players}
        self.prune(connected_ids)

        if len(players) <= self.config.no_kick_below:
            logger.info(
                "Player count (%s) is not above %s, skipping AFK checks.",
                len(players), self.config.no_kick_below
            )
            return []

        kicked = []
        for player in players:
            if is_exempt(player, self.config):
                self.exempted.add(player.player_id)
                self.tracker.forget(player.player_id)
                continue
            self.exempted.discard(player.player_id)

            action = self.tracker.evaluate(player.player_id, player.stats, now)
            if action is Action.START_TRACKING:
                logger.debug("Tracking %s (%s)", player.name, player.player_id)
            elif action is Action.RESET_TRACKING:
                logger.debug("%s (%s) is active", player.name, player.player_id)
            elif action is Action.THRESHOLD_REACHED:
                self.tracker.forget(player.player_id)
                self.kick_afk(player.player_id, player.name)
                kicked.append(player.player_id)

        return kicked

    def kick_afk(self, player_id: str, player_name: str) -> KickResult:
        message = afk_kick_message(player_name, player_id)
        logger.info(message)
        self.notifier.send(afk_kick_message(player_name, player_id, self.config.lang))
        result = self.kicker.kick(player_id, player_name)
        if result is not KickResult.KICKED:
            self.notifier.send(
                afk_kick_message(player_name, player_id, self.config.lang, "afk_kick_failed")
            )
        return result


def afk_kick_loop(
    monitor: AfkMonitor,
    clock: Callable[[], float] = monotonic,
    sleep_func: Callable[[float], None] = sleep,
    interval_secs: float = WATCH_INTERVAL_SECS,
) -> None:
    """
    Runs the watch turns forever
    A failing turn is logged, then the next one will come as usual
    """
    while True:
        logger.info("Polling for players...")
        try:
            monitor.run_cycle(clock())
        except Exception:
            logger.exception("Error in AFK watch loop")
        logger.debug("Sleeping for %s seconds...", interval_secs)
        sleep_func(interval_secs)


def build_monitor(config: AfkKickConfig) -> AfkMonitor:
    api = CrconApi(config.rcon_server, config.rcon_api_key)
    return AfkMonitor(
        config=config,
        api=api,
        kicker=KickEnforcer(api, config.kick_message),
        notifier=DiscordNotifier(config.discord_webhook, BOT_NAME),
    )


def main() -> None:
    load_dotenv()
    try:
        config = load_config()
    except ConfigError as error:
        logging.basicConfig(level=logging.INFO)
        logger.error("%s", error)
        sys.exit(1)

    logging.basicConfig(
        level=config.log_level,
        format="[%(asctime)s][%(levelname)s][%(name)s] %(message)s",
    )
    logger.info(
        "\n-------------------------------------------------------------------------------\n"
        "%s (started)\n"
        "-------------------------------------------------------------------------------",
        BOT_NAME
    )
    logger.info(
        "AFK time : %s mins - VIP whitelist : %s - whitelist flag : %s - no kick below : %s players",
        config.afk_time_minutes,
        config.vip_whitelist,
        config.whitelist_flag or "(none)",
        config.no_kick_below
    )

    monitor = build_monitor(config)

    # Initial pause : wait to be sure the CRCON is fully started
    if STARTUP_DELAY_SECS:
        sleep(STARTUP_DELAY_SECS)

    afk_kick_loop(monitor)


# Launching and running (infinite loop)
if __name__ == "__main__":
    main()
