import sys, os
myPath = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, myPath + '/../')

import json

import pytest

from mensa_bot.canteen_loader import CANTEEN_URL_TODAY
from mensa_bot.config import BotConfig, ConfigurationException

ENTRIES = {
    "mattermostUrl": "chat.example.org",
    "userEmail": "mensabot@example.org",
    "userPassword": "secret",
    "teamName": "team",
    "mentionName": "@mensabot",
    "channelNameDebug": "mensabot-debug",
    "channelNameProduction": "mensa",
}


def writeConfig(tmp_path, entries):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(entries), encoding="utf-8")
    return str(path)


def testReadConfigFile(tmp_path):
    config = BotConfig.fromFile(writeConfig(tmp_path, dict(ENTRIES, favorites=[" Curry", "SCHNITZEL", ""],
                                                           maxTries=5)))

    assert config.teamName == "team"
    assert config.favorites == ("curry", "schnitzel")
    assert config.maxTries == 5


def testDefaults():
    config = BotConfig.fromDict(ENTRIES)

    assert config.mattermostScheme == "https"
    assert config.mattermostPort == 443
    assert config.displayName == "MensaBot"
    assert config.favorites == ()
    assert config.canteenUrlToday == CANTEEN_URL_TODAY


def testMissingEntries():
    entries = dict(ENTRIES)
    del entries["teamName"]

    with pytest.raises(ConfigurationException) as e:
        BotConfig.fromDict(entries)
    assert "teamName" in str(e.value)


def testMissingFile(tmp_path):
    with pytest.raises(ConfigurationException):
        BotConfig.fromFile(str(tmp_path / "missing.json"))


def testInvalidJson(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("mattermostUrl = 'chat.example.org'", encoding="utf-8")

    with pytest.raises(ConfigurationException):
        BotConfig.fromFile(str(path))
