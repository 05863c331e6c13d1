""" Configuration of the bot. Loaded once at startup and handed to every component that needs it. """
import json
from typing import NamedTuple, Tuple

from mensa_bot.canteen_loader import CANTEEN_URL_TODAY, CANTEEN_URL_TOMORROW

REQUIRED_KEYS = ["mattermostUrl", "userEmail", "userPassword", "teamName", "mentionName", "channelNameDebug",
                 "channelNameProduction"]


class ConfigurationException(Exception):
    """Raised when the configuration file is missing or incomplete"""
    pass


class BotConfig(NamedTuple):
    mattermostUrl: str
    userEmail: str
    userPassword: str
    teamName: str
    mentionName: str
    channelNameDebug: str
    channelNameProduction: str
    mattermostScheme: str = "https"
    mattermostPort: int = 443
    displayName: str = "MensaBot"
    favorites: Tuple[str, ...] = ()
    canteenUrlToday: str = CANTEEN_URL_TODAY
    canteenUrlTomorrow: str = CANTEEN_URL_TOMORROW
    requestTimeout: float = 15
    maxTries: int = 3

    @classmethod
    def fromDict(cls, entries):
        """ Creates the configuration from a dict. Unknown keys are ignored, favorites are stored lowercase. """
        missing = [key for key in REQUIRED_KEYS if not entries.get(key)]
        if len(missing) != 0:
            raise ConfigurationException("Missing configuration entries: " + ", ".join(missing))

        values = {key: entries[key] for key in cls._fields if key in entries}
        values["favorites"] = tuple(str(f).strip().lower() for f in entries.get("favorites", []) if str(f).strip() != "")
        return cls(**values)

    @classmethod
    def fromFile(cls, path):
        try:
            with open(path, "r", encoding="utf-8") as fp:
                entries = json.load(fp)
        except OSError as e:
            raise ConfigurationException("Config file is missing: " + str(path)) from e
        except json.decoder.JSONDecodeError as e:
            raise ConfigurationException("Config file " + str(path) + " is not valid json: " + str(e)) from e

        if not isinstance(entries, dict):
            raise ConfigurationException("Config file " + str(path) + " must contain a json object")
        return cls.fromDict(entries)
