# !/usr/bin/env python
# -*- coding: utf-8 -*-
""" Mattermost bot that posts the canteen plan of today or tomorrow when asked for it """
import logging
import signal
import sys

from pylogging import HandlerType, setup_logger

from mensa_bot.config import BotConfig, ConfigurationException
from mensa_bot.session import BotSetupException, MensaBot

VERSION = "v0.2"

logger = logging.getLogger(__name__)


def readConfig(args):
    """ Reads the configuration from the json file given as first argument """
    if len(args) < 2:
        raise ConfigurationException("MensaBot expects the configuration file as first argument!")
    return BotConfig.fromFile(args[1])


def setupGracefulShutdown(bot):
    def onSignal(signum, frame):
        logger.info("Received signal " + str(signum))
        bot.shutdown()
        sys.exit(0)

    signal.signal(signal.SIGINT, onSignal)
    signal.signal(signal.SIGTERM, onSignal)


def main(args=None):
    """Main entry point of the app. """
    setup_logger(log_directory='./logs', file_handler_type=HandlerType.ROTATING_FILE_HANDLER, allow_console_logging=True,
                 console_log_level=logging.DEBUG, max_file_size_bytes=1000000)

    args = sys.argv if args is None else args
    logger.info("Starting MensaBot " + VERSION)

    try:
        config = readConfig(args)
        bot = MensaBot(config)
        setupGracefulShutdown(bot)
        bot.connect()
    except (ConfigurationException, BotSetupException) as e:
        logger.error(e)
        return 1

    if not bot.startListening():
        bot.shutdown()
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
