"""
Input validation for listings and blog posts.

The validators return a :class:`ValidationResult` carrying the first
problem found, worded for display next to the submitted form. Numeric
fields may arrive as numbers or strings (form posts); an empty string
means "not provided".
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional, Union

from realty_portal.core.models.domain.enums import ListingType, PropertyType

Number = Union[int, float]

PROPERTY_TYPES = tuple(item.value for item in PropertyType)
LISTING_TYPES = tuple(item.value for item in ListingType)

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
MAX_BLOG_IMAGES = 10
MAX_PRICE = 999_999_999_999

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: Optional[str] = None


OK = ValidationResult(valid=True)


def _invalid(message: str) -> ValidationResult:
    return ValidationResult(valid=False, error=message)


def _in_range(value: Number, min_value: Optional[Number], max_value: Optional[Number]) -> bool:
    if min_value is not None and value < min_value:
        return False
    if max_value is not None and value > max_value:
        return False
    return True


def safe_parse_int(value: Any, min_value: Optional[Number] = None, max_value: Optional[Number] = None) -> Optional[int]:
    """Parse an integer leniently.

    Numbers are range-checked and then floored; strings are read up to the
    first non-digit (``"12 sqm"`` is 12). Anything unparsable, non-finite
    or out of range yields None, as does ``None`` or ``""``.
    """
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if math.isnan(value) or math.isinf(value):
            return None
        if not _in_range(value, min_value, max_value):
            return None
        return math.floor(value)
    match = _INT_PREFIX.match(str(value))
    if not match:
        return None
    parsed = int(match.group(1))
    return parsed if _in_range(parsed, min_value, max_value) else None


def safe_parse_float(
    value: Any, min_value: Optional[Number] = None, max_value: Optional[Number] = None
) -> Optional[float]:
    """Parse a float leniently; same rules as :func:`safe_parse_int` without flooring."""
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if math.isnan(value) or math.isinf(value):
            return None
        return float(value) if _in_range(value, min_value, max_value) else None
    match = _FLOAT_PREFIX.match(str(value))
    if not match:
        return None
    parsed = float(match.group(1))
    if math.isinf(parsed) or not _in_range(parsed, min_value, max_value):
        return None
    return parsed


def max_year_built() -> int:
    return datetime.now().year + 10


def _present(body: Mapping[str, Any], key: str) -> bool:
    return body.get(key) is not None


def _blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


# (field, parser, min, max, message)
_NUMERIC_RULES = (
    ("bedrooms", safe_parse_int, 0, 50, "Bedrooms must be a number between 0 and 50"),
    ("bathrooms", safe_parse_float, 0, 50, "Bathrooms must be a number between 0 and 50"),
    ("size", safe_parse_float, 0, 1_000_000, "Size must be a number between 0 and 1,000,000"),
    ("price", safe_parse_float, 0, MAX_PRICE, "Price must be a valid positive number"),
    ("year_built", safe_parse_int, 1800, None, None),
    ("parking", safe_parse_int, 0, 100, "Parking spaces must be a number between 0 and 100"),
    ("floor", safe_parse_int, 0, 200, "Floor must be a number between 0 and 200"),
    ("total_floors", safe_parse_int, 1, 200, "Total floors must be a number between 1 and 200"),
)


def validate_listing_input(body: Mapping[str, Any]) -> ValidationResult:
    """Validate a listing create/update payload (snake_case keys)."""
    title = body.get("title")
    if _blank(title):
        return _invalid("Title is required and must be a non-empty string")
    if len(title) > 200:
        return _invalid("Title must be less than 200 characters")

    description = body.get("description")
    if _blank(description):
        return _invalid("Description is required and must be a non-empty string")
    if len(description) > 10000:
        return _invalid("Description must be less than 10000 characters")

    if _present(body, "location"):
        location = body["location"]
        if not isinstance(location, str):
            return _invalid("Location must be a string")
        if not location.strip():
            return _invalid("Location cannot be an empty string")
        if len(location) > 200:
            return _invalid("Location must be less than 200 characters")

    if _present(body, "city"):
        if not isinstance(body["city"], str) or len(body["city"]) > 100:
            return _invalid("City must be a string less than 100 characters")

    if _present(body, "address"):
        if not isinstance(body["address"], str) or len(body["address"]) > 500:
            return _invalid("Address must be a string less than 500 characters")

    if body.get("property_type") and body["property_type"] not in PROPERTY_TYPES:
        return _invalid("Invalid property type")

    if body.get("listing_type") and body["listing_type"] not in LISTING_TYPES:
        return _invalid('Invalid listing type. Must be "sale" or "rent"')

    for field_name, parser, min_value, max_value, message in _NUMERIC_RULES:
        if not _present(body, field_name):
            continue
        raw = body[field_name]
        if field_name == "year_built":
            max_value = max_year_built()
            message = f"Year built must be a number between 1800 and {max_value}"
        if parser(raw, min_value, max_value) is None and raw != "":
            return _invalid(message)

    if "images" in body and not isinstance(body["images"], list):
        return _invalid("Images must be an array")

    if _present(body, "amenities") and not isinstance(body["amenities"], (list, dict)):
        return _invalid("Amenities must be an array or object")

    return OK


def validate_blog_post_input(body: Mapping[str, Any]) -> ValidationResult:
    """Validate a blog post create/update payload (snake_case keys)."""
    title = body.get("title")
    if _blank(title):
        return _invalid("Title is required and must be a non-empty string")
    if len(title) > 200:
        return _invalid("Title must be less than 200 characters")

    content = body.get("content")
    if _blank(content):
        return _invalid("Content is required and must be a non-empty string")
    if len(content) > 100_000:
        return _invalid("Content must be less than 100,000 characters")

    slug = body.get("slug")
    if _blank(slug):
        return _invalid("Slug is required and must be a non-empty string")
    if not SLUG_PATTERN.match(slug):
        return _invalid("Slug must contain only lowercase letters, numbers, and hyphens")
    if len(slug) > 200:
        return _invalid("Slug must be less than 200 characters")

    if _present(body, "excerpt"):
        if not isinstance(body["excerpt"], str) or len(body["excerpt"]) > 500:
            return _invalid("Excerpt must be a string less than 500 characters")

    if "images" in body and not isinstance(body["images"], list):
        return _invalid("Images must be an array")
    if isinstance(body.get("images"), list) and len(body["images"]) > MAX_BLOG_IMAGES:
        return _invalid(f"Maximum {MAX_BLOG_IMAGES} images allowed per blog post")

    return OK


def slugify(title: str) -> str:
    """Derive a URL slug accepted by :data:`SLUG_PATTERN` from a title."""
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")
    return slug[:200].rstrip("-")
