"""Location display helpers for listings."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

METRO_MANILA_CITIES = (
    "Manila",
    "Quezon City",
    "Caloocan",
    "Las Piñas",
    "Makati",
    "Malabon",
    "Mandaluyong",
    "Marikina",
    "Muntinlupa",
    "Navotas",
    "Parañaque",
    "Pasay",
    "Pasig",
    "Pateros",
    "San Juan",
    "Taguig",
    "Valenzuela",
)

_METRO_MANILA_LOOKUP = {city.lower() for city in METRO_MANILA_CITIES}

NOT_SPECIFIED = "Location not specified"


def is_metro_manila_city(city: Optional[str]) -> bool:
    if not city:
        return False
    return city.strip().lower() in _METRO_MANILA_LOOKUP


def format_location_display(city: Optional[str], location: Optional[str], address: Optional[str]) -> str:
    """Short location for listing cards.

    The address wins when present. Metro Manila listings show only the city;
    elsewhere the city is followed by the province/region from ``location``.
    """
    if address:
        return address
    if city:
        if not is_metro_manila_city(city) and location and location.lower() != city.lower():
            return f"{city}, {location}"
        return city
    return location or NOT_SPECIFIED


def format_location_with_label(city: Optional[str], location: Optional[str], address: Optional[str]) -> str:
    """Longer location line for listing details (``"Neighbourhood, City"`` in Metro Manila)."""
    if address:
        return address
    if city:
        if is_metro_manila_city(city):
            return f"{location}, {city}" if location else city
        return location or city
    return location or NOT_SPECIFIED


def group_cities_for_filter(cities: Iterable[str]) -> Dict[str, List[str]]:
    """Split cities into Metro Manila and everywhere else, each sorted."""
    metro_manila: List[str] = []
    outside: List[str] = []
    for city in cities:
        (metro_manila if is_metro_manila_city(city) else outside).append(city)
    return {"metro_manila": sorted(metro_manila), "outside": sorted(outside)}
