""" Decides what to answer to a chat message and sends the answer as a reply to it """
import logging
import re

from mensa_bot import formatter
from mensa_bot.canteen_loader import CanteenUnavailableException, Loader

logger = logging.getLogger(__name__)

ALIVE = "alive"
TODAY = "today"
TOMORROW = "tomorrow"
LEGEND = "legend"
HELP = "help"
FALLBACK = "fallback"


def wordPattern(words):
    """ Matches any of the given words if it stands on its own (start/end of message or a non word character around it) """
    return re.compile(r"(?:^|\W)(" + words + r")(?:$|\W)", re.IGNORECASE)


# Checked from top to bottom, the first match decides the intent
COMMAND_PATTERNS = [
    (ALIVE, wordPattern("alive|running|up")),
    (TODAY, wordPattern("heute|today")),
    (TOMORROW, wordPattern("morgen|tomorrow")),
    (LEGEND, wordPattern("legend|legende")),
    (HELP, wordPattern("command|help")),
]

ALIVE_MESSAGE = "Yes I'm up and running!"
FALLBACK_MESSAGE = "What does this even mean?!"
UNAVAILABLE_MESSAGE = "Der Speiseplan ist gerade nicht verfügbar :disappointed: Versuch es später nochmal."


def classify(message):
    for intent, pattern in COMMAND_PATTERNS:
        if pattern.search(message) is not None:
            return intent
    return FALLBACK


class CommandDispatcher:
    """ Answers chat posts. Holds no state between two posts. """

    def __init__(self, config, sendMessage, loader=None):
        """
        :param config: BotConfig with canteen urls and favorites
        :param sendMessage: callable(message, channelId, replyToId) used for every answer
        :param loader: canteen Loader, created from the config if not given
        """
        self.config = config
        self.sendMessage = sendMessage
        if loader is None:
            loader = Loader(config.requestTimeout, config.maxTries)
        self.loader = loader

    def handleCommand(self, post):
        """ Answers the given post (dict with id, channel_id and message) and returns the handled intent """
        message = post.get("message", "")
        channelId = post["channel_id"]
        replyToId = post["id"]

        intent = classify(message)
        logger.info("Handling post " + replyToId + " as " + intent + ": " + message)

        if intent == ALIVE:
            self.sendMessage(ALIVE_MESSAGE, channelId, replyToId)
        elif intent == TODAY:
            self.writeCanteenPlan(self.config.canteenUrlToday, formatter.HEADER_TODAY, channelId, replyToId)
        elif intent == TOMORROW:
            self.writeCanteenPlan(self.config.canteenUrlTomorrow, formatter.HEADER_TOMORROW, channelId, replyToId)
        elif intent == LEGEND:
            self.sendMessage(formatter.LEGEND, channelId, replyToId)
        elif intent == HELP:
            self.sendMessage(formatter.HELP, channelId, replyToId)
        else:
            self.sendMessage(FALLBACK_MESSAGE, channelId, replyToId)

        return intent

    def writeCanteenPlan(self, url, header, channelId, replyToId):
        try:
            dishes = self.loader.getCanteenPlan(url)
        except CanteenUnavailableException as e:
            logger.error("Could not load canteen plan: " + str(e))
            self.sendMessage(UNAVAILABLE_MESSAGE, channelId, replyToId)
            return

        self.sendMessage(formatter.formatDishes(dishes, header, self.config.favorites), channelId, replyToId)
