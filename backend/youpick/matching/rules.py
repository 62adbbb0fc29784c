"""Per-intent category rules plus price and indoor/outdoor tables.

Everything here is loaded once at import and never mutated. Adding an intent
means adding a row to ``CATEGORY_RULES``.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType

from .types import Intent, PriceToken


@dataclass(frozen=True, slots=True)
class RuleSet:
    allowed_types: frozenset[str]
    required_keywords: tuple[str, ...]
    excluded_keywords: tuple[str, ...]
    excluded_types: frozenset[str]
    fallback_allowed_types: frozenset[str]

    @property
    def widened_types(self) -> frozenset[str]:
        return self.allowed_types | self.fallback_allowed_types


@dataclass(frozen=True, slots=True)
class PriceBand:
    min_level: int
    max_level: int
    # missing price_level is let through but ranked lower
    allow_missing: bool

    def contains(self, level: int) -> bool:
        return self.min_level <= level <= self.max_level


_FOOD_TYPES = frozenset({"restaurant", "cafe", "bakery", "meal_takeaway", "meal_delivery"})
_DRINKS_TYPES = frozenset({"bar", "brewery", "wine_bar", "cocktail_bar", "night_club"})
_ACTIVITY_TYPES = frozenset(
    {
        "park",
        "tourist_attraction",
        "museum",
        "movie_theater",
        "bowling_alley",
        "amusement_center",
        "amusement_park",
        "hiking_area",
        "art_gallery",
        "zoo",
        "aquarium",
        "campground",
        "stadium",
    }
)
_SHOPPING_TYPES = frozenset(
    {
        "store",
        "shopping_mall",
        "clothing_store",
        "shoe_store",
        "book_store",
        "home_goods_store",
        "furniture_store",
        "gift_shop",
        "jewelry_store",
        "department_store",
    }
)
_WELLNESS_TYPES = frozenset(
    {
        "spa",
        "massage",
        "gym",
        "yoga_studio",
        "beauty_salon",
        "hair_care",
        "physiotherapist",
        "chiropractor",
        "health",
    }
)

# Trades and civic services that never belong in a leisure pick.
_TRADE_TYPES = frozenset(
    {
        "plumber",
        "electrician",
        "general_contractor",
        "locksmith",
        "moving_company",
        "storage",
        "car_repair",
        "gas_station",
        "insurance_agency",
        "lawyer",
    }
)
_CIVIC_TYPES = frozenset(
    {"atm", "bank", "post_office", "courthouse", "fire_station", "police", "funeral_home"}
)
_BUSINESS_KEYWORDS = (
    "staffing",
    "plumbing",
    "contractor",
    "industrial",
    "warehouse",
    "insurance",
    "attorney",
    "hvac",
    "recruiting",
)


CATEGORY_RULES: MappingProxyType[Intent, RuleSet] = MappingProxyType(
    {
        Intent.FOOD: RuleSet(
            allowed_types=_FOOD_TYPES,
            required_keywords=(
                "restaurant", "cafe", "bakery", "brunch", "dinner", "lunch", "tacos",
                "pizza", "noodles", "sushi", "ramen", "bistro", "eatery", "grill",
                "kitchen", "diner", "bbq", "seafood", "steakhouse", "buffet",
                "pho", "thai", "mexican", "italian", "chinese", "indian", "burger",
                "sandwich", "wings", "food",
            ),
            excluded_keywords=_BUSINESS_KEYWORDS,
            excluded_types=_TRADE_TYPES,
            fallback_allowed_types=frozenset({"cafe", "bakery"}),
        ),
        Intent.DRINKS: RuleSet(
            allowed_types=_DRINKS_TYPES,
            required_keywords=(
                "bar", "brewery", "cocktail", "taproom", "pub", "wine", "lounge",
                "tavern", "saloon", "beer", "ale", "spirits", "distillery",
            ),
            excluded_keywords=_BUSINESS_KEYWORDS,
            excluded_types=_TRADE_TYPES | {"bakery"},
            fallback_allowed_types=frozenset({"bar", "brewery"}),
        ),
        Intent.ACTIVITY: RuleSet(
            allowed_types=_ACTIVITY_TYPES,
            required_keywords=(
                "park", "trail", "museum", "gallery", "bowling", "escape", "arcade",
                "garden", "walk", "tour", "zoo", "aquarium", "theater", "cinema",
                "trampoline", "climbing", "kayak", "pottery", "workshop", "golf",
                "mini golf", "laser tag", "go kart", "paintball", "adventure",
            ),
            excluded_keywords=(
                "staffing", "plumbing", "contractor", "industrial", "warehouse",
                "audio visual", "audiovisual", "av ", "event production",
                "event services", "lighting rental", "staging", "party rental",
                "equipment rental", "production company", "speaker rental",
                "projector", "truss", "insurance", "attorney", "hvac",
            ),
            excluded_types=_TRADE_TYPES
            | {
                "electronics_store",
                "home_goods_store",
                "car_rental",
                "roofing_contractor",
                "accounting",
            },
            fallback_allowed_types=frozenset({"tourist_attraction", "park"}),
        ),
        Intent.SHOPPING: RuleSet(
            allowed_types=_SHOPPING_TYPES,
            required_keywords=(
                "shop", "store", "boutique", "market", "book", "vintage", "decor",
                "clothing", "fashion", "gift", "antique", "thrift", "mall", "outlet",
                "retail",
            ),
            excluded_keywords=(
                "plumbing", "hvac", "contractor", "roofing", "electric", "landscaping",
                "pest control", "auto repair", "car wash", "insurance", "attorney",
                "dental", "medical", "clinic", "urgent care", "chiropractic",
                "storage unit", "dry cleaner", "laundromat", "tax service", "notary",
                "pharmacy", "cvs", "walgreens", "rite aid", "staffing", "industrial",
            ),
            excluded_types=_TRADE_TYPES
            | _CIVIC_TYPES
            | {
                "roofing_contractor", "car_wash", "convenience_store", "laundry",
                "dry_cleaning", "car_dealer", "car_rental", "real_estate_agency",
                "travel_agency", "lodging", "pharmacy", "drugstore", "health",
                "hospital", "doctor", "dentist", "veterinary_care", "accounting",
            },
            fallback_allowed_types=frozenset({"store", "home_goods_store", "gift_shop"}),
        ),
        Intent.EVENTS: RuleSet(
            allowed_types=frozenset(
                {
                    "concert_hall",
                    "theater",
                    "stadium",
                    "event_venue",
                    "night_club",
                    "performing_arts_theater",
                }
            ),
            required_keywords=(
                "show", "concert", "festival", "live", "tour", "tonight", "today",
                "performance", "theater", "theatre", "comedy", "music", "dance",
                "exhibition", "event",
            ),
            excluded_keywords=_BUSINESS_KEYWORDS
            + ("equipment rental", "audio visual", "audiovisual", "production company"),
            excluded_types=_TRADE_TYPES,
            fallback_allowed_types=frozenset({"theater", "concert_hall"}),
        ),
        Intent.WELLNESS: RuleSet(
            allowed_types=_WELLNESS_TYPES,
            required_keywords=(
                "spa", "massage", "yoga", "pilates", "wellness", "fitness", "sauna",
                "facial", "meditation", "chiropractic", "acupuncture", "gym", "health",
                "beauty", "skincare", "reiki", "stretch", "float",
            ),
            excluded_keywords=(
                "staffing", "event", "catering", "coordinator", "security", "rental",
                "audiovisual", "dj", "venue", "plumbing", "hvac", "commercial",
                "industrial", "contractor", "recruiting", "employment", "insurance",
                "attorney", "accounting", "tax", "notary", "auto repair",
            ),
            excluded_types=_TRADE_TYPES
            | _CIVIC_TYPES
            | {
                "roofing_contractor", "car_wash", "laundry", "car_dealer",
                "real_estate_agency", "travel_agency", "accounting", "electronics_store",
            },
            fallback_allowed_types=frozenset({"health", "beauty_salon", "gym"}),
        ),
        Intent.SURPRISE: RuleSet(
            allowed_types=_FOOD_TYPES
            | _DRINKS_TYPES
            | _ACTIVITY_TYPES
            | _SHOPPING_TYPES
            | (_WELLNESS_TYPES - {"hair_care", "physiotherapist", "chiropractor"}),
            # no keyword requirement for surprise
            required_keywords=(),
            excluded_keywords=(
                "plumbing", "hvac", "contractor", "industrial", "warehouse",
                "staffing", "recruiting", "employment", "insurance", "attorney",
                "audio visual", "audiovisual", "production company", "equipment rental",
            ),
            excluded_types=_TRADE_TYPES
            | {
                "roofing_contractor", "car_wash", "accounting", "funeral_home",
                "courthouse", "fire_station", "police",
            },
            fallback_allowed_types=frozenset(
                {"restaurant", "bar", "tourist_attraction", "store"}
            ),
        ),
    }
)


def rules_for(intent: Intent | str | None) -> RuleSet:
    return CATEGORY_RULES[Intent.parse(intent)]


# ── Preference tables ────────────────────────────────────────────────

PRICE_BANDS: MappingProxyType[PriceToken, PriceBand] = MappingProxyType(
    {
        PriceToken.CHEAP: PriceBand(min_level=0, max_level=1, allow_missing=False),
        PriceToken.MID: PriceBand(min_level=1, max_level=2, allow_missing=True),
        PriceToken.TREAT: PriceBand(min_level=2, max_level=4, allow_missing=True),
    }
)

OUTDOOR_TYPES = frozenset(
    {
        "park",
        "hiking_area",
        "tourist_attraction",
        "campground",
        "garden",
        "natural_feature",
        "stadium",
    }
)
OUTDOOR_KEYWORDS = (
    "patio",
    "rooftop",
    "outdoor seating",
    "beer garden",
    "terrace",
    "courtyard",
    "deck",
    "open air",
    "al fresco",
)
INDOOR_TYPES = frozenset(
    {
        "museum",
        "movie_theater",
        "bowling_alley",
        "amusement_center",
        "gym",
        "spa",
        "restaurant",
        "shopping_mall",
        "store",
        "bar",
        "night_club",
        "theater",
        "concert_hall",
    }
)

# Category special cases: a type that looks like a match under a sibling intent.
BAR_LIKE_TYPES = frozenset({"bar", "night_club"})
CAFE_LIKE_TYPES = frozenset({"cafe", "bakery"})
