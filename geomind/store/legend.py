"""Curated legend shops shown on every map.

These entries are fixed for the lifetime of the process. Their ids use the
``seed-`` prefix so they can never collide with registered vendors.
"""

from geomind.models.schemas import LatLng, Shop

LEGEND_SHOPS: tuple[Shop, ...] = (
    Shop(
        id="seed-1",
        name="Jannal Kadai",
        address="Mylapore, Chennai",
        coords=LatLng(lat=13.0336, lng=80.2697),
        emoji="🥘",
        cuisine="Bajjis",
        description="Legendary window-service spot in Mylapore.",
    ),
    Shop(
        id="seed-2",
        name="Kalathi Rose Milk",
        address="South Mada St, Chennai",
        coords=LatLng(lat=13.0333, lng=80.2685),
        emoji="🥤",
        cuisine="Drinks",
        description="The most iconic Rose Milk in the city.",
    ),
    Shop(
        id="seed-3",
        name="Amma Mess",
        address="Alwarpet, Chennai",
        coords=LatLng(lat=13.0339, lng=80.2550),
        emoji="🍛",
        cuisine="Chettinad meals",
        description="Banana-leaf meals and fiery Chettinad gravies.",
    ),
    Shop(
        id="seed-4",
        name="Ratna Cafe",
        address="Triplicane High Rd, Chennai",
        coords=LatLng(lat=13.0569, lng=80.2767),
        emoji="🍲",
        cuisine="Idli sambar",
        description="Idlis drowned in bottomless sambar since 1948.",
    ),
)
