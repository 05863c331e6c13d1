from typing import NamedTuple, Sequence, Tuple

EMPTY_PRICES = ("", "", "")


class Dish(NamedTuple):
    """ One entry of the canteen plan. Built once per fetch and never modified afterwards. """

    name: str
    prices: Tuple[str, str, str] = EMPTY_PRICES
    isVegetarian: bool = False
    isVegan: bool = False
    containsBeef: bool = False
    containsPork: bool = False
    containsFish: bool = False
    containsChicken: bool = False
    lactoseFree: bool = False

    def isFavorite(self, favorites: Sequence[str]) -> bool:
        """ Returns true if the lowercased name contains any of the (lowercase) favorite substrings """
        name = self.name.lower()
        for favorite in favorites:
            if favorite in name:
                return True
        return False

    def toDict(self):
        return {
            "name": self.name,
            "prices": list(self.prices),
            "isVegetarian": self.isVegetarian,
            "isVegan": self.isVegan,
            "containsBeef": self.containsBeef,
            "containsPork": self.containsPork,
            "containsFish": self.containsFish,
            "containsChicken": self.containsChicken,
            "lactoseFree": self.lactoseFree
        }
