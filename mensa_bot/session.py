""" Connection of the bot to the Mattermost server. Receives posts over the websocket and sends the answers. """
import asyncio
import json
import logging
import time

import requests
from mattermostdriver import Driver

from mensa_bot.dispatcher import CommandDispatcher

logger = logging.getLogger(__name__)

POSTED_EVENT = "posted"
RETRY_BASE_DELAY = 1
MAX_RECONNECT_DELAY = 60
KEEPALIVE_DELAY = 5


class BotSetupException(Exception):
    """Raised when the bot can not connect to the server or can not find its team or channels"""
    pass


def createDriver(config):
    return Driver({
        "url": config.mattermostUrl,
        "scheme": config.mattermostScheme,
        "port": config.mattermostPort,
        "login_id": config.userEmail,
        "password": config.userPassword,
        "timeout": config.requestTimeout,
        "keepalive": True,
        "keepalive_delay": KEEPALIVE_DELAY
    })


class MensaBot:

    def __init__(self, config, driver=None, dispatcher=None):
        self.config = config
        self.driver = driver if driver is not None else createDriver(config)
        self.dispatcher = dispatcher if dispatcher is not None else CommandDispatcher(config, self.sendMessage)

        self.user = None
        self.team = None
        self.channelDebug = None
        self.channelProduction = None
        self.stopped = False
        self.receivedEvents = 0

    def connect(self):
        """ Checks that the server is running, logs in and resolves the team and both channels """
        logger.info("Connecting to " + self.config.mattermostUrl)
        self.ensureServerIsRunning()
        self.loginAsBotUser()
        self.setTeam(self.config.teamName)
        self.channelDebug = self.getChannel(self.config.channelNameDebug)
        self.channelProduction = self.getChannel(self.config.channelNameProduction)

    def ensureServerIsRunning(self):
        try:
            status = self.driver.client.get("/system/ping")
        except requests.exceptions.RequestException as e:
            raise BotSetupException("There was a problem pinging the Mattermost server. Are you sure it's running? "
                                    + str(e)) from e
        logger.info("Server detected, status: " + str(status.get("status") if isinstance(status, dict) else status))

    def loginAsBotUser(self):
        try:
            self.user = self.driver.login()
        except requests.exceptions.RequestException as e:
            raise BotSetupException("There was a problem logging into the Mattermost server as '" +
                                    self.config.userEmail + "': " + str(e)) from e
        logger.info("Logged in as user '" + self.config.userEmail + "': " + self.user["id"])

    def setTeam(self, teamName):
        try:
            self.team = self.driver.teams.get_team_by_name(teamName)
        except requests.exceptions.RequestException as e:
            raise BotSetupException("We failed to get the team '" + teamName +
                                    "' or we do not appear to be a member of it: " + str(e)) from e
        logger.info("Got team with name '" + teamName + "': " + self.team["id"])

    def getChannel(self, channelName):
        try:
            channel = self.driver.channels.get_channel_by_name(self.team["id"], channelName)
        except requests.exceptions.RequestException as e:
            raise BotSetupException("We failed to get the channel: " + channelName + ": " + str(e)) from e
        logger.info("Got channel with name '" + channelName + "': " + channel["id"])
        return channel

    def sendMessage(self, message, channelId, replyToId=""):
        """ Creates a post in the channel, as thread reply if replyToId is set.<br>
        Connection errors are retried. If sending fails for good the error is logged and the message dropped. """
        options = {"channel_id": channelId, "message": message}
        if replyToId:
            options["root_id"] = replyToId

        tries = 0
        while True:
            tries += 1
            try:
                self.driver.posts.create_post(options=options)
                return True
            except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
                if tries >= self.config.maxTries:
                    logger.error("We failed to send a message to channel " + channelId + " after " + str(tries) +
                                 " tries: " + str(e))
                    return False
                delay = RETRY_BASE_DELAY * 2 ** (tries - 1)
                logger.warning("Could not send message to channel " + channelId + ", retrying in " + str(delay) + "s")
                time.sleep(delay)
            except requests.exceptions.RequestException as e:
                logger.error("We failed to send a message to channel " + channelId + ": " + str(e))
                return False

    def handleWebSocketEvent(self, rawEvent):
        """ Dispatches new posts that mention the bot or were written in the debug channel.
        Returns True if the post was handed to the dispatcher. """
        if not rawEvent:
            return False

        try:
            event = json.loads(rawEvent)
        except json.decoder.JSONDecodeError:
            logger.warning("Skipping websocket message that is no json: " + str(rawEvent))
            return False

        logger.debug("Handling event: " + str(event))

        # We only care about new posts
        if event.get("event") != POSTED_EVENT:
            return False

        try:
            post = json.loads(event["data"]["post"])
        except (KeyError, TypeError, json.decoder.JSONDecodeError):
            logger.warning("Posted event without readable post: " + str(event))
            return False

        # ignore my own posts
        if post.get("user_id") == self.user["id"]:
            return False

        channelId = event.get("broadcast", {}).get("channel_id") or post.get("channel_id")
        if post.get("message", "").startswith(self.config.mentionName) or channelId == self.channelDebug["id"]:
            self.dispatcher.handleCommand(post)
            return True
        return False

    async def onWebSocketMessage(self, message):
        # Awaited, so posts are still answered one after the other while the loop keeps serving the heartbeat
        self.receivedEvents += 1
        await asyncio.get_running_loop().run_in_executor(None, self.handleWebSocketEvent, message)

    def startListening(self):
        """ Announces the start in the debug channel and blocks while handling websocket events.<br>
        If the websocket closes while the bot is not stopped it reconnects with an increasing delay.
        Returns False if the connection could not be restored after maxTries attempts in a row. """
        self.sendMessage("_[" + self.config.displayName + "] has **started** running_", self.channelDebug["id"])

        reconnects = 0
        while not self.stopped:
            self.receivedEvents = 0
            self.driver.init_websocket(self.onWebSocketMessage)
            if self.stopped:
                break

            if self.receivedEvents != 0:
                reconnects = 0
            reconnects += 1
            if reconnects > self.config.maxTries:
                logger.error("Websocket closed and could not be reopened after " + str(self.config.maxTries) +
                             " tries")
                return False

            delay = min(RETRY_BASE_DELAY * 2 ** (reconnects - 1), MAX_RECONNECT_DELAY)
            logger.warning("Websocket closed while the bot is running. Reconnecting in " + str(delay) + "s (" +
                           str(reconnects) + "/" + str(self.config.maxTries) + ")")
            time.sleep(delay)
        return True

    def shutdown(self):
        """ Closes the websocket and announces the stop in the debug channel """
        logger.info("Shutting down")
        self.stopped = True
        if getattr(self.driver, "websocket", None) is not None:
            self.driver.disconnect()
        if self.channelDebug is not None:
            self.sendMessage("_[" + self.config.displayName + "] has **stopped** running_", self.channelDebug["id"])
