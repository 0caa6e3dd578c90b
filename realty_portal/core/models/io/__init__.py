"""
I/O models for the HTTP API.

Pydantic schemas describing request bodies and response envelopes; they
are kept apart from the table models in ``core.database.entities``.
"""
