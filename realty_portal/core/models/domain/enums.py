"""Domain enums shared by entities, schemas and services."""

from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    """
    Account roles.

    Admins moderate content and manage users; agents publish listings;
    writers publish blog posts. Every role may submit both kinds of content.
    """

    ADMIN = "ADMIN"
    AGENT = "AGENT"
    WRITER = "WRITER"


class ListingType(str, Enum):
    sale = "sale"
    rent = "rent"


class PropertyType(str, Enum):
    condominium = "condominium"
    house_and_lot = "house-and-lot"
    townhouse = "townhouse"
    apartment = "apartment"
    penthouse = "penthouse"
    lot = "lot"
    building = "building"
    commercial = "commercial"


class ActivityAction(str, Enum):
    """Actions recorded in the activity audit log."""

    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    APPROVE = "APPROVE"
    REJECT = "REJECT"


class ActivityItemType(str, Enum):
    """Kind of record an activity refers to."""

    LISTING = "LISTING"
    BLOG = "BLOG"
    USER = "USER"
    AUTH = "AUTH"
