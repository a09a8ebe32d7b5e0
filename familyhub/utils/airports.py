"""IATA airport code -> IANA time zone lookup for travel legs."""
import re
from typing import Optional

DEFAULT_AIRPORT_TIMEZONE = "America/New_York"

IATA_TIMEZONES = {
    "JFK": "America/New_York", "LGA": "America/New_York", "EWR": "America/New_York",
    "BOS": "America/New_York", "PHL": "America/New_York", "MIA": "America/New_York",
    "ORD": "America/Chicago", "MDW": "America/Chicago", "DFW": "America/Chicago",
    "IAH": "America/Chicago", "DEN": "America/Denver", "SLC": "America/Denver",
    "PHX": "America/Phoenix", "LAX": "America/Los_Angeles", "SFO": "America/Los_Angeles",
    "SAN": "America/Los_Angeles", "SEA": "America/Los_Angeles", "PDX": "America/Los_Angeles",
    "LAS": "America/Los_Angeles", "HNL": "Pacific/Honolulu", "ANC": "America/Anchorage",
    "LHR": "Europe/London", "CDG": "Europe/Paris", "FRA": "Europe/Berlin",
    "AMS": "Europe/Amsterdam", "NRT": "Asia/Tokyo", "HND": "Asia/Tokyo",
    "ICN": "Asia/Seoul", "SIN": "Asia/Singapore", "DXB": "Asia/Dubai",
    "DOH": "Asia/Qatar", "SYD": "Australia/Sydney", "AKL": "Pacific/Auckland",
}

_CODE = re.compile(r"\b([A-Z]{3})\b")


def timezone_for_airport(airport: Optional[str]) -> str:
    """Accepts a bare code ("JFK") or a label ("New York (JFK)")."""
    if not airport:
        return DEFAULT_AIRPORT_TIMEZONE
    match = _CODE.search(airport)
    code = (match.group(1) if match else airport).strip().upper()
    return IATA_TIMEZONES.get(code, DEFAULT_AIRPORT_TIMEZONE)
