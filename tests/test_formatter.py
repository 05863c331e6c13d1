import sys, os
myPath = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, myPath + '/../')

from mensa_bot import formatter
from mensa_bot.dish import Dish


def testEmptyDishList():
    message = formatter.formatDishes([], "**Heute gibt es:**", [])
    assert message == "**Heute gibt es:**\n\n| Essen | Features | Preise |\n| -- | -- | -- |\n"


def testRowWithThreePrices():
    dish = Dish("Chili sin Carne", ("2,10€", "3,50€", "4,20€"), isVegetarian=True, isVegan=True)
    row = formatter.dishToRow(dish, [])

    assert row == "| Chili sin Carne | :sunflower: | 2,10€ // 3,50€ // 4,20€ |"
    assert row.split("|")[3].split("//") == [" 2,10€ ", " 3,50€ ", " 4,20€ "]


def testVeganRendersOnlyOneDietEmoji():
    dish = Dish("Tofu", isVegetarian=True, isVegan=True)
    row = formatter.dishToRow(dish, [])

    assert ":sunflower:" in row
    assert ":carrot:" not in row


def testVegetarian():
    row = formatter.dishToRow(Dish("Käsespätzle", isVegetarian=True), [])
    assert row == "| Käsespätzle | :carrot: |  //  //  |"


def testEmojiOrder():
    dish = Dish("Surf and Turf", ("9,90€", "", ""), containsBeef=True, containsPork=True, containsFish=True,
                containsChicken=True, lactoseFree=True)
    row = formatter.dishToRow(dish, ["turf"])

    assert row == "| Surf and Turf | :heart_eyes: :cow2: :pig2: :fish: :rooster: :milk_glass: | 9,90€ //  //  |"


def testFavoriteIsCaseInsensitive():
    dish = Dish("Chicken Curry Bowl", containsChicken=True)

    assert dish.isFavorite(["curry"])
    assert not dish.isFavorite(["pizza"])
    assert formatter.dishToRow(dish, ["pizza", "curry"]).startswith("| Chicken Curry Bowl | :heart_eyes: :rooster: |")


def testRowsKeepInputOrder():
    dishes = [Dish("B"), Dish("A"), Dish("C")]
    lines = formatter.formatDishes(dishes, "header", []).splitlines()

    assert lines[0] == "header"
    assert lines[1] == ""
    assert [line.split("|")[1].strip() for line in lines[4:]] == ["B", "A", "C"]


def testLegendExplainsEveryEmoji():
    for emoji in [":heart_eyes:", ":sunflower:", ":carrot:", ":cow2:", ":pig2:", ":fish:", ":rooster:",
                  ":milk_glass:"]:
        assert emoji in formatter.LEGEND
