"""
afk_kick_config.py

A plugin for HLL CRCON (https://github.com/MarechJ/hll_rcon_tool)
that kicks the players who stay AFK for too long.

Source : https://github.com/ElGuillermo

Feel free to use/modify/distribute, as long as you keep this note in your code
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional


# Configuration (you must set these in the environment or in a .env file !)
# -----------------------------------------------------------------------------

# RCON_SERVER      : CRCON url (ie : "https://rcon.example.com")
# RCON_API_KEY     : CRCON API key (see /settings/api-keys)
# AFK_TIME         : minutes without any stats change before being kicked
# VIP_WHITELIST    : "YES" to never kick the VIPs
# NO_KICK_BELOW    : no kick will occur while the server has this many players (or less)
# KICK_MESSAGE     : the reason displayed to the kicked player
# WHITELIST_FLAG   : (optional) players having this flag in their profile won't be kicked
# DISCORD_WEBHOOK  : (optional) Discord's channel webhook
# DISCORD_LANG     : (optional) Discord messages translations
#                    Available : 0 for english, 1 for french, 2 for german
# LOG_LEVEL        : (optional) Default : "INFO"


# Miscellaneous (you don't have to change these)
# ----------------------------------------------

# The interval between watch turns (in seconds)
# Default : 60
WATCH_INTERVAL_SECS = 60

# Kick attempts before giving up, and the pause between two attempts (in seconds)
# Default : 3, 5
KICK_MAX_ATTEMPTS = 3
KICK_RETRY_DELAY_SECS = 5

# Timeout for any request to the CRCON API (in seconds)
# Default : 10
HTTP_TIMEOUT_SECS = 10

# Pause before the first watch turn (in seconds)
# Raise it if the CRCON is started at the same time as this script
# Default : 0
STARTUP_DELAY_SECS = 0

# Bot name that will be displayed in CRCON "audit logs" and Discord messages
BOT_NAME = "CRCON_afk_kick"


# (End of configuration)
# -----------------------------------------------------------------------------


# Unicode variation selectors (ie : the emoji presentation selector U+FE0F)
VARIATION_SELECTORS = {chr(codepoint) for codepoint in range(0xFE00, 0xFE10)}


class ConfigError(ValueError):
    """
    Raised when a required setting is missing or invalid
    """


@dataclass(frozen=True)
class AfkKickConfig:
    rcon_server: str
    rcon_api_key: str
    afk_time_minutes: int
    vip_whitelist: bool
    no_kick_below: int
    kick_message: str
    whitelist_flag: str = ""
    discord_webhook: Optional[str] = None
    lang: int = 0
    log_level: str = "INFO"

    @property
    def afk_time_secs(self) -> int:
        return self.afk_time_minutes * 60


def clean_flag(flag: str) -> str:
    """
    Returns the flag without its surrounding whitespaces
    and without any variation selector,
    so "⭐️ " (with U+FE0F) matches "⭐"
    """
    return "".join(char for char in flag if char not in VARIATION_SELECTORS).strip()


def _required(environ: Mapping[str, str], name: str) -> str:
    value = environ.get(name, "").strip()
    if not value:
        raise ConfigError(f"{name} environment variable not set")
    return value


def _integer(name: str, value: str, minimum: int) -> int:
    try:
        return_value = int(value)
    except ValueError:
        raise ConfigError(f"{name} must be an integer (got {value!r})") from None
    if return_value < minimum:
        raise ConfigError(f"{name} must be {minimum} or more (got {return_value})")
    return return_value


def load_config(environ: Optional[Mapping[str, str]] = None) -> AfkKickConfig:
    """
    Reads and validates the settings from the environment
    Raises ConfigError on the first missing or invalid one
    """
    if environ is None:
        environ = os.environ

    rcon_server = _required(environ, "RCON_SERVER").rstrip("/")
    rcon_api_key = _required(environ, "RCON_API_KEY")
    afk_time_minutes = _integer("AFK_TIME", _required(environ, "AFK_TIME"), 1)
    vip_whitelist = _required(environ, "VIP_WHITELIST") == "YES"
    no_kick_below = _integer("NO_KICK_BELOW", _required(environ, "NO_KICK_BELOW"), 0)
    kick_message = _required(environ, "KICK_MESSAGE")

    lang = _integer("DISCORD_LANG", environ.get("DISCORD_LANG", "").strip() or "0", 0)
    if lang > 2:
        raise ConfigError(f"DISCORD_LANG must be 0, 1 or 2 (got {lang})")

    log_level = environ.get("LOG_LEVEL", "").strip().upper() or "INFO"
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigError(f"LOG_LEVEL must be a logging level name (got {log_level!r})")

    return AfkKickConfig(
        rcon_server=rcon_server,
        rcon_api_key=rcon_api_key,
        afk_time_minutes=afk_time_minutes,
        vip_whitelist=vip_whitelist,
        no_kick_below=no_kick_below,
        kick_message=kick_message,
        whitelist_flag=clean_flag(environ.get("WHITELIST_FLAG", "")),
        discord_webhook=environ.get("DISCORD_WEBHOOK", "").strip() or None,
        lang=lang,
        log_level=log_level,
    )
