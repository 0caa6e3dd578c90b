"""Realty Portal: property listings, blog publishing and an admin back office."""

__version__ = "1.0.0"
