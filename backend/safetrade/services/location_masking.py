"""
Location privacy helpers.

WHAT: Coarse location display and meeting-place suggestions for listings
WHY: Sellers never expose a street address; buyers still need a rough area
HOW: Major-city list, county lookup and ZIP-prefix fallback over city/ZIP only
"""

from dataclasses import dataclass

from ..core.config import settings


MAJOR_CITIES = [
    "Newark", "Jersey City", "Paterson", "Elizabeth", "Edison", "Woodbridge",
    "Lakewood", "Toms River", "Hamilton", "Trenton", "Clifton", "Camden",
    "Brick", "Cherry Hill", "Passaic", "Union City", "Middletown", "Gloucester",
    "Vineland", "Bayonne", "New Brunswick", "Hoboken", "Plainfield", "Westfield",
    "Paramus", "Hackensack", "Princeton", "Atlantic City",
]

COUNTY_BY_CITY = {
    # North Jersey
    "Hoboken": "Hudson County",
    "Jersey City": "Hudson County",
    "Bayonne": "Hudson County",
    "Union City": "Hudson County",
    "Weehawken": "Hudson County",
    # Central Jersey
    "New Brunswick": "Middlesex County",
    "Edison": "Middlesex County",
    "Woodbridge": "Middlesex County",
    "Princeton": "Mercer County",
    "Trenton": "Mercer County",
    # South Jersey
    "Camden": "Camden County",
    "Cherry Hill": "Camden County",
    "Atlantic City": "Atlantic County",
    "Vineland": "Cumberland County",
    # North/Northwest
    "Paterson": "Passaic County",
    "Clifton": "Passaic County",
    "Passaic": "Passaic County",
    "Hackensack": "Bergen County",
    "Paramus": "Bergen County",
    # Central/Shore
    "Toms River": "Ocean County",
    "Lakewood": "Ocean County",
    "Brick": "Ocean County",
    "Middletown": "Monmouth County",
}

BASE_MEETING_SUGGESTIONS = [
    "Public police station parking lot (safest option)",
    "Busy shopping center with security cameras",
    "Well-lit public parking area during daytime",
    "Bank or credit union parking lot (with surveillance)",
    "Popular restaurant or coffee shop",
    "Public library parking area",
]

SELLER_PRIVACY_TIPS = [
    "Never meet buyers at your home address",
    "Choose busy public locations for all meetings",
    "Don't share your exact address until meeting",
    "Meet during daylight hours when possible",
    "Bring a friend or let someone know your plans",
    "Trust your instincts - cancel if something feels wrong",
]


@dataclass(frozen=True)
class MaskedLocation:
    """Three granularities of a privacy-safe location label."""
    masked: str
    vicinity: str
    general: str


def _is_major_city(city: str) -> bool:
    lowered = city.lower()
    return any(lowered in major.lower() or major.lower() in lowered for major in MAJOR_CITIES)


def _zip_region(zip_code: str) -> MaskedLocation:
    try:
        zip_num = int(zip_code[:2])
    except ValueError:
        zip_num = None

    if zip_num is not None and 7 <= zip_num <= 8:
        return MaskedLocation("North Jersey area", "North Jersey, NJ", "North NJ")
    if zip_num is not None and 8 <= zip_num <= 9:
        return MaskedLocation("Central Jersey area", "Central Jersey, NJ", "Central NJ")
    return MaskedLocation("South Jersey area", "South Jersey, NJ", "South NJ")


def mask_location(city: str, zip_code: str | None = None, state: str | None = None) -> MaskedLocation:
    """
    Mask a listing location for privacy while keeping geographic context.

    Major cities keep their name, smaller towns collapse to their county, and
    unknown towns fall back to a region derived from the ZIP prefix.

    Args:
        city: Listing city
        zip_code: Optional listing ZIP code
        state: State abbreviation (defaults to settings.DEFAULT_STATE)

    Returns:
        MaskedLocation with masked, vicinity and general labels
    """
    state = state or settings.DEFAULT_STATE

    if not city:
        return MaskedLocation("Location not specified", "New Jersey area", "NJ")

    if _is_major_city(city):
        return MaskedLocation(f"{city} area", f"Near {city}, {state}", f"{city}, {state}")

    county = COUNTY_BY_CITY.get(city)
    if county:
        return MaskedLocation(county, f"{county}, {state}", county)

    if zip_code:
        return _zip_region(zip_code)

    return MaskedLocation("New Jersey area", "New Jersey", "NJ")


def get_location_display(
    city: str,
    zip_code: str | None = None,
    state: str | None = None,
    show_exact: bool = False,
) -> str:
    """Location label for a listing; exact only when explicitly requested."""
    state = state or settings.DEFAULT_STATE
    if show_exact:
        return f"{city}, {state} {zip_code}" if zip_code else f"{city}, {state}"
    return mask_location(city, zip_code, state).masked


def get_meeting_location_suggestions(city: str, zip_code: str | None = None) -> list[str]:
    """
    Suggest public meeting places near a listing.

    Returns:
        Base suggestions, with a region-specific one first when the region is known
    """
    general = mask_location(city, zip_code).general
    suggestions = list(BASE_MEETING_SUGGESTIONS)

    if "North" in general:
        suggestions.insert(0, "North Jersey mall or shopping center")
    elif "Central" in general:
        suggestions.insert(0, "Central Jersey retail area")
    elif "South" in general:
        suggestions.insert(0, "South Jersey shopping plaza")

    return suggestions


def get_seller_privacy_tips() -> list[str]:
    return list(SELLER_PRIVACY_TIPS)
