# !/usr/bin/env python
# -*- coding: utf-8 -*-
""" Loads the canteen plan of the Studierendenwerk Hamburg and parses the dish table into Dish objects """
import logging
import time
from typing import List

import requests
from bs4 import BeautifulSoup

from mensa_bot.dish import Dish

logger = logging.getLogger(__name__)

CANTEEN_URL_TODAY = "http://speiseplan.studierendenwerk-hamburg.de/de/580/2018/0/"
CANTEEN_URL_TOMORROW = "http://speiseplan.studierendenwerk-hamburg.de/de/580/2018/99/"

DISH_CLASS = "dish-description"
PRICE_CLASS = "price"
PRICE_TIERS = 3

# Maps the (lowercased) title of an icon next to a dish to the flag it sets
ICON_TITLE_FLAGS = {
    "vegetarisch": "isVegetarian",
    "vegan": "isVegan",
    "mit rind": "containsBeef",
    "mit schwein": "containsPork",
    "mit fisch": "containsFish",
    "mit geflügel": "containsChicken",
    "laktosefrei": "lactoseFree"
}

RETRY_BASE_DELAY = 1


class CanteenUnavailableException(Exception):
    """Raised when the canteen plan can not be loaded"""
    pass


class CanteenParseException(CanteenUnavailableException):
    """Raised when the loaded canteen page can not be parsed"""
    pass


def hasClass(tag, className):
    return className in (tag.get("class") or [])


def findOutermost(root, className):
    """ Returns all tags below root with the given class, in document order.<br>
    Tags inside of another matching tag are skipped. """
    found = []
    for tag in root.find_all(class_=className):
        nested = False
        for parent in tag.parents:
            if parent is root:
                break
            if hasClass(parent, className):
                nested = True
                break
        if not nested:
            found.append(tag)
    return found


def trimNodeName(name):
    """ Removes the whitespace the page puts around brackets and commas. Each replacement runs only once. """
    trimmed = name.strip(" \t\n")
    trimmed = trimmed.replace("  ", " ")
    trimmed = trimmed.replace("( ", "(")
    trimmed = trimmed.replace(" )", ")")
    trimmed = trimmed.replace(" ,", ",")
    return trimmed


def dishFromNode(node) -> Dish:
    """ Creates a dish from a dish-description tag.<br>
    Prices are taken from the price cells next to the tag, the flags from the titles of the icons inside of it. """
    name = trimNodeName(node.get_text(" ", strip=True))

    prices = [""] * PRICE_TIERS
    if node.parent is not None:
        priceNodes = findOutermost(node.parent, PRICE_CLASS)
        if len(priceNodes) > PRICE_TIERS:
            logger.debug("Dropping " + str(len(priceNodes) - PRICE_TIERS) + " additional prices of dish " + name)

        for i, priceNode in enumerate(priceNodes[:PRICE_TIERS]):
            prices[i] = priceNode.get_text(" ", strip=True).replace("\xa0", "")

    flags = dict.fromkeys(ICON_TITLE_FLAGS.values(), False)
    for img in node.find_all("img"):
        flag = ICON_TITLE_FLAGS.get((img.get("title") or "").lower())
        if flag is not None:
            flags[flag] = True

    flags["isVegetarian"] = flags["isVegetarian"] or flags["isVegan"]
    return Dish(name, tuple(prices), **flags)


def parseCanteenPlan(htmlToParse) -> List[Dish]:
    """ Parses a canteen page and returns all dishes in the order they appear on the page """
    if not isinstance(htmlToParse, (str, bytes)):
        raise CanteenParseException("Canteen page has no text content: " + type(htmlToParse).__name__)

    try:
        soup = BeautifulSoup(htmlToParse, "html5lib")
    except (TypeError, ValueError) as e:
        raise CanteenParseException("Could not parse canteen page: " + str(e)) from e

    return [dishFromNode(node) for node in findOutermost(soup, DISH_CLASS)]


class Loader:
    """ Loads canteen pages over HTTP. Connection errors and timeouts are retried with an increasing delay. """

    HEADERS = {
        'User-Agent': 'MensaBot/0.2',
        'Accept': 'text/html',
        'Cache-Control': 'no-cache'
    }

    def __init__(self, timeout=15, maxTries=3):
        """
        :param timeout: seconds to wait for the canteen server on each request
        :param maxTries: number of requests before giving up on connection errors
        """
        self.timeout = timeout
        self.maxTries = max(1, maxTries)

    def loadPage(self, url):
        loadTries = 0
        while True:
            loadTries += 1
            try:
                r = requests.get(url=url, headers=self.HEADERS, timeout=self.timeout)
                r.raise_for_status()
                if r.encoding is None or r.encoding.lower() == "iso-8859-1":
                    # requests falls back to latin-1 for text/html without charset
                    r.encoding = r.apparent_encoding
                return r.text
            except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
                if loadTries >= self.maxTries:
                    raise CanteenUnavailableException(
                        "Could not reach " + url + " after " + str(loadTries) + " tries: " + str(e)) from e

                delay = RETRY_BASE_DELAY * 2 ** (loadTries - 1)
                logger.warning("got " + type(e).__name__ + " for url " + url + ". retrying in " + str(delay) +
                               "s (" + str(loadTries) + "/" + str(self.maxTries) + ")")
                time.sleep(delay)
            except requests.exceptions.RequestException as e:
                raise CanteenUnavailableException("Could not load " + url + ": " + str(e)) from e

    def getCanteenPlan(self, url) -> List[Dish]:
        """ Loads the page at the given url and returns the dishes on it.
        Raises CanteenUnavailableException if the page can not be loaded or parsed """
        logger.info("Call url: " + url)
        dishes = parseCanteenPlan(self.loadPage(url))
        logger.info("Found " + str(len(dishes)) + " dishes at " + url)
        for dish in dishes:
            logger.debug(dish.toDict())
        return dishes
