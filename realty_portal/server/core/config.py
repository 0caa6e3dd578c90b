"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Placeholder shipped in .env.example; never valid outside local development
DEFAULT_SESSION_SECRET = "change-me-in-production"

# =====================================================================
# Grouped Configuration Models
# =====================================================================


class DatabaseConfig(BaseModel):
    """Database connection and retry configuration."""

    url: str = Field(
        default="sqlite+aiosqlite:///./realty_portal.db",
        alias="DATABASE_URL",
        description="Application database URL (postgres URLs are rewritten to asyncpg)",
    )
    retry_attempts: int = Field(
        default=3, alias="DATABASE_RETRY_ATTEMPTS", description="Attempts for operations hitting transient errors"
    )
    retry_wait_seconds: float = Field(
        default=0.5, alias="DATABASE_RETRY_WAIT_SECONDS", description="Fixed wait between retry attempts"
    )

    model_config = {"populate_by_name": True}


class SessionConfig(BaseModel):
    """Signed session cookie configuration."""

    secret: str = Field(
        default=DEFAULT_SESSION_SECRET,
        alias="SESSION_SECRET",
        description="Secret used to sign session tokens (HS256)",
    )
    cookie_name: str = Field(default="realty_session", alias="SESSION_COOKIE_NAME", description="Session cookie name")
    cookie_secure: bool = Field(
        default=False, alias="SESSION_COOKIE_SECURE", description="Only send the session cookie over HTTPS"
    )
    inactivity_timeout_seconds: int = Field(
        default=30 * 60,
        alias="SESSION_INACTIVITY_TIMEOUT",
        description="Seconds of inactivity after which a session is rejected",
    )
    max_age_seconds: int = Field(
        default=24 * 60 * 60,
        alias="SESSION_MAX_AGE",
        description="Absolute session lifetime in seconds, counted from sign-in",
    )
    activity_refresh_seconds: int = Field(
        default=60,
        alias="SESSION_ACTIVITY_REFRESH",
        description="Minimum interval between last-activity refreshes",
    )
    invalidate_on_restart: bool = Field(
        default=True,
        alias="SESSION_INVALIDATE_ON_RESTART",
        description="Reject sessions issued before the current server process started",
    )

    model_config = {"populate_by_name": True}

    @property
    def uses_default_secret(self) -> bool:
        return self.secret == DEFAULT_SESSION_SECRET


class CloudinaryConfig(BaseModel):
    """Cloudinary media storage configuration."""

    cloud_name: Optional[str] = Field(default=None, alias="CLOUDINARY_CLOUD_NAME", description="Cloudinary cloud name")
    api_key: Optional[str] = Field(default=None, alias="CLOUDINARY_API_KEY", description="Cloudinary API key")
    api_secret: Optional[str] = Field(default=None, alias="CLOUDINARY_API_SECRET", description="Cloudinary API secret")

    model_config = {"populate_by_name": True}

    @property
    def is_configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)


class UploadConfig(BaseModel):
    """Image upload configuration."""

    upload_dir: str = Field(
        default="public/uploads", alias="UPLOAD_DIR", description="Local directory used when Cloudinary is not configured"
    )
    public_prefix: str = Field(
        default="/uploads", alias="UPLOAD_PUBLIC_PREFIX", description="URL prefix for locally stored uploads"
    )
    max_bytes: int = Field(default=20 * 1024 * 1024, alias="UPLOAD_MAX_BYTES", description="Maximum upload size")
    max_width: int = Field(default=2000, alias="UPLOAD_MAX_WIDTH", description="Processed image maximum width")
    max_height: int = Field(default=1500, alias="UPLOAD_MAX_HEIGHT", description="Processed image maximum height")
    jpeg_quality: int = Field(default=85, alias="UPLOAD_JPEG_QUALITY", description="JPEG quality of processed images")

    model_config = {"populate_by_name": True}


class EmailJSConfig(BaseModel):
    """EmailJS relay configuration."""

    service_id: Optional[str] = Field(default=None, alias="EMAILJS_SERVICE_ID", description="EmailJS service ID")
    template_id: Optional[str] = Field(default=None, alias="EMAILJS_TEMPLATE_ID", description="EmailJS template ID")
    public_key: Optional[str] = Field(default=None, alias="EMAILJS_PUBLIC_KEY", description="EmailJS public key")
    private_key: Optional[str] = Field(
        default=None, alias="EMAILJS_PRIVATE_KEY", description="EmailJS private key (access token)"
    )
    to_email: Optional[str] = Field(default=None, alias="CONTACT_TO_EMAIL", description="Recipient of contact forms")
    api_url: str = Field(
        default="https://api.emailjs.com/api/v1.0/email/send",
        alias="EMAILJS_API_URL",
        description="EmailJS REST endpoint",
    )

    model_config = {"populate_by_name": True}

    @property
    def is_configured(self) -> bool:
        return bool(self.service_id and self.template_id and self.public_key)


class RecaptchaConfig(BaseModel):
    """Google reCAPTCHA v3 configuration."""

    secret_key: Optional[str] = Field(default=None, alias="RECAPTCHA_SECRET_KEY", description="reCAPTCHA secret key")
    verify_url: str = Field(
        default="https://www.google.com/recaptcha/api/siteverify",
        alias="RECAPTCHA_VERIFY_URL",
        description="reCAPTCHA verification endpoint",
    )
    min_score: float = Field(default=0.5, alias="RECAPTCHA_MIN_SCORE", description="Minimum accepted score")

    model_config = {"populate_by_name": True}


class ActivityLogConfig(BaseModel):
    """Activity audit log configuration."""

    enabled: bool = Field(default=True, alias="ENABLE_ACTIVITY_LOGGING", description="Record activities at all")
    log_auth_actions: bool = Field(default=False, alias="LOG_AUTH_ACTIONS", description="Record LOGIN and LOGOUT")
    log_update_actions: bool = Field(default=False, alias="LOG_UPDATE_ACTIONS", description="Record UPDATE actions")
    minimal_data: bool = Field(
        default=False, alias="LOG_MINIMAL_DATA", description="Skip IP address and user agent capture"
    )

    model_config = {"populate_by_name": True}


class CORSConfig(BaseModel):
    """CORS configuration."""

    origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS", description="Allowed CORS origins (use * for all)")
    allow_credentials: bool = Field(
        default=True, alias="CORS_ALLOW_CREDENTIALS", description="Allow credentials in CORS requests"
    )
    allow_methods: list[str] = Field(
        default=["*"], alias="CORS_ALLOW_METHODS", description="Allowed HTTP methods (use * for all)"
    )
    allow_headers: list[str] = Field(
        default=["*"], alias="CORS_ALLOW_HEADERS", description="Allowed HTTP headers (use * for all)"
    )

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    # =====================================================================
    # Pydantic Configuration
    # =====================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # Server Configuration
    # =====================================================================
    server_host: str = Field(default="0.0.0.0", alias="REALTY_SERVER_HOST", description="Server host to bind to")
    server_port: int = Field(default=8000, alias="REALTY_SERVER_PORT", description="Server port number")
    log_level: str = Field(
        default="INFO",
        alias="REALTY_LOG_LEVEL",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    site_url: str = Field(
        default="http://localhost:3000", alias="SITE_URL", description="Public site URL, used in CLI reports"
    )

    # =====================================================================
    # Database / Session
    # =====================================================================
    database_url: str = Field(default="sqlite+aiosqlite:///./realty_portal.db", alias="DATABASE_URL")
    database_retry_attempts: int = Field(default=3, alias="DATABASE_RETRY_ATTEMPTS")
    database_retry_wait_seconds: float = Field(default=0.5, alias="DATABASE_RETRY_WAIT_SECONDS")

    session_secret: str = Field(default=DEFAULT_SESSION_SECRET, alias="SESSION_SECRET")
    session_cookie_name: str = Field(default="realty_session", alias="SESSION_COOKIE_NAME")
    session_cookie_secure: bool = Field(default=False, alias="SESSION_COOKIE_SECURE")
    session_inactivity_timeout: int = Field(default=30 * 60, alias="SESSION_INACTIVITY_TIMEOUT")
    session_max_age: int = Field(default=24 * 60 * 60, alias="SESSION_MAX_AGE")
    session_activity_refresh: int = Field(default=60, alias="SESSION_ACTIVITY_REFRESH")
    session_invalidate_on_restart: bool = Field(default=True, alias="SESSION_INVALIDATE_ON_RESTART")

    # =====================================================================
    # Integrations
    # =====================================================================
    cloudinary_cloud_name: Optional[str] = Field(default=None, alias="CLOUDINARY_CLOUD_NAME")
    cloudinary_api_key: Optional[str] = Field(default=None, alias="CLOUDINARY_API_KEY")
    cloudinary_api_secret: Optional[str] = Field(default=None, alias="CLOUDINARY_API_SECRET")

    upload_dir: str = Field(default="public/uploads", alias="UPLOAD_DIR")
    upload_public_prefix: str = Field(default="/uploads", alias="UPLOAD_PUBLIC_PREFIX")
    upload_max_bytes: int = Field(default=20 * 1024 * 1024, alias="UPLOAD_MAX_BYTES")
    upload_max_width: int = Field(default=2000, alias="UPLOAD_MAX_WIDTH")
    upload_max_height: int = Field(default=1500, alias="UPLOAD_MAX_HEIGHT")
    upload_jpeg_quality: int = Field(default=85, alias="UPLOAD_JPEG_QUALITY")

    emailjs_service_id: Optional[str] = Field(default=None, alias="EMAILJS_SERVICE_ID")
    emailjs_template_id: Optional[str] = Field(default=None, alias="EMAILJS_TEMPLATE_ID")
    emailjs_public_key: Optional[str] = Field(default=None, alias="EMAILJS_PUBLIC_KEY")
    emailjs_private_key: Optional[str] = Field(default=None, alias="EMAILJS_PRIVATE_KEY")
    emailjs_api_url: str = Field(default="https://api.emailjs.com/api/v1.0/email/send", alias="EMAILJS_API_URL")
    contact_to_email: Optional[str] = Field(default=None, alias="CONTACT_TO_EMAIL")

    recaptcha_secret_key: Optional[str] = Field(default=None, alias="RECAPTCHA_SECRET_KEY")
    recaptcha_verify_url: str = Field(
        default="https://www.google.com/recaptcha/api/siteverify", alias="RECAPTCHA_VERIFY_URL"
    )
    recaptcha_min_score: float = Field(default=0.5, alias="RECAPTCHA_MIN_SCORE")

    contact_rate_limit: int = Field(
        default=10, alias="CONTACT_RATE_LIMIT", description="Contact submissions allowed per client per window"
    )
    contact_rate_window_seconds: int = Field(default=60, alias="CONTACT_RATE_WINDOW")

    # =====================================================================
    # Activity Logging
    # =====================================================================
    enable_activity_logging: bool = Field(default=True, alias="ENABLE_ACTIVITY_LOGGING")
    log_auth_actions: bool = Field(default=False, alias="LOG_AUTH_ACTIONS")
    log_update_actions: bool = Field(default=False, alias="LOG_UPDATE_ACTIONS")
    log_minimal_data: bool = Field(default=False, alias="LOG_MINIMAL_DATA")

    # =====================================================================
    # CORS
    # =====================================================================
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(default=["*"], alias="CORS_ALLOW_METHODS")
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def database(self) -> DatabaseConfig:
        """Get database configuration from environment variables."""
        return DatabaseConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def session(self) -> SessionConfig:
        """Get session cookie configuration from environment variables."""
        return SessionConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def cloudinary(self) -> CloudinaryConfig:
        """Get Cloudinary configuration from environment variables."""
        return CloudinaryConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def upload(self) -> UploadConfig:
        """Get upload configuration from environment variables."""
        return UploadConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def emailjs(self) -> EmailJSConfig:
        """Get EmailJS configuration from environment variables."""
        return EmailJSConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def recaptcha(self) -> RecaptchaConfig:
        """Get reCAPTCHA configuration from environment variables."""
        return RecaptchaConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def activity_log(self) -> ActivityLogConfig:
        """Get activity logging configuration from environment variables."""
        return ActivityLogConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def cors(self) -> CORSConfig:
        """Get CORS configuration from environment variables."""
        return CORSConfig.model_validate(self.model_dump(by_alias=True))


settings = Settings()
