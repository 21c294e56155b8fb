from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str  # mongodb://host:port/dbname
    host: str
    port: int
    debug: bool
    jwt_secret: str  # HS256 signing secret for session tokens
    cors_origins: list[str] = []

    # MongoDB connection pool and per-call timeouts
    database_max_pool_size: int = 20
    database_connect_timeout_ms: int = 2000
    database_server_selection_timeout_ms: int = 5000
    database_timeout_ms: int = 10000  # Upper bound for any single storage operation

    redis_url: str = "redis://localhost:6379/0"  # arq mail queue

    otp_ttl_minutes: int = 10
    bcrypt_rounds: int = 10

    # Transactional email HTTP API (Brevo compatible)
    email_api_url: str = "https://api.brevo.com/v3/smtp/email"
    email_api_key: str = ""
    email_from: str = "no-reply@linkup.app"
    email_from_name: str = "Linkup"
    email_timeout_seconds: float = 20.0

    uploads_path: str = "uploads"  # Directory path for uploaded media
    public_base_url: str = "http://localhost:5000"  # Used to build public media URLs
    max_upload_bytes: int = 10 * 1024 * 1024

    expose_error_details: bool = False  # Include exception text in 500 responses (development only)

    model_config = {
        "env_file": [".env"],
        "env_prefix": "LINKUP_",
        "extra": "ignore",
    }
