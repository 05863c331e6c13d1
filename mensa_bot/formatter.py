""" Renders dishes into markdown messages for Mattermost """
from typing import List, Sequence

from mensa_bot.dish import Dish

HEADER_TODAY = "**Heute gibt es:**"
HEADER_TOMORROW = "**Morgen gibt es:**"

TABLE_HEADER = "| Essen | Features | Preise |\n"
TABLE_SEPARATOR = "| -- | -- | -- |\n"

LEGEND = "**Legende:**\n" \
         ":heart_eyes: = Lieblingsgericht\n" \
         ":sunflower: = Veganes Gericht\n" \
         ":carrot: = Vegetarisches Gericht\n" \
         ":cow2: = Enthält Rindfleisch\n" \
         ":pig2: = Enthält Schweinefleisch\n" \
         ":fish: = Enthält Fisch\n" \
         ":rooster: = Enthält Geflügel\n" \
         ":milk_glass: = Laktose**freies**(!) Gericht\n"

HELP = "**Befehle:**\n" \
       "`heute` / `today` = Speiseplan von heute\n" \
       "`morgen` / `tomorrow` = Speiseplan von morgen\n" \
       "`legende` / `legend` = Erklärung der Emojis\n" \
       "`alive` / `running` / `up` = Läuft der Bot noch?\n" \
       "`help` / `command` = Diese Hilfe\n"


def dishToRow(dish: Dish, favorites: Sequence[str]) -> str:
    row = "| " + dish.name + " |"
    if dish.isFavorite(favorites):
        row += " :heart_eyes:"

    if dish.isVegan:
        row += " :sunflower:"
    elif dish.isVegetarian:
        row += " :carrot:"

    if dish.containsBeef:
        row += " :cow2:"
    if dish.containsPork:
        row += " :pig2:"
    if dish.containsFish:
        row += " :fish:"
    if dish.containsChicken:
        row += " :rooster:"

    if dish.lactoseFree:
        row += " :milk_glass:"

    row += " |"
    row += " %s // %s // %s |" % dish.prices
    return row


def formatDishes(dishes: List[Dish], header: str, favorites: Sequence[str]) -> str:
    """ Returns the header followed by a table with one row per dish.
    An empty dish list results in a table without rows. """
    message = header + "\n\n"
    message += TABLE_HEADER
    message += TABLE_SEPARATOR
    for dish in dishes:
        message += dishToRow(dish, favorites) + "\n"
    return message
