"""Application-wide constants."""

PROJECT_NAME = "Realty Portal"
API_VERSION = "1.0.0"
API_STR = "/api"
