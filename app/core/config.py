from urllib.parse import quote_plus

from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "Car Service API"
    api_prefix: str = "/car-service/api/v1"
    app_env: str = Field(default="development", alias="ENVIRONMENT")
    app_port: int = Field(default=8080, alias="PORT")
    allowed_origins: str = Field(default="*", alias="ALLOWED_ORIGINS")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database (PostgreSQL, schema "cars")
    db_host: str = Field(default="localhost", alias="DB_HOST")
    db_port: int = Field(default=5432, alias="DB_PORT")
    db_user: str = Field(default="postgres", alias="DB_USER")
    db_password: str = Field(default="", alias="DB_PASSWORD")
    db_name: str = Field(default="car_service", alias="DB_NAME")
    db_ssl: bool = Field(default=False, alias="DB_SSL")
    db_pool_size: int = Field(default=10, alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=5, alias="DB_MAX_OVERFLOW")

    # Auth
    introspect_url: str = Field(default="", alias="INTROSPECT_URL")
    jwt_secret: str | None = Field(default=None, alias="JWT_SECRET")
    jwt_algorithms: str = Field(default="HS256", alias="JWT_ALGORITHMS")

    # Outbound services
    notification_service_url: str = Field(default="", alias="NOTIFICATION_SERVICE_URL")
    email_service_url: str = Field(default="", alias="EMAIL_SERVICE_URL")
    outbound_timeout_seconds: float = Field(
        default=10.0, alias="OUTBOUND_TIMEOUT_SECONDS",
    )  # introspection, notifications, email

    # Object storage (DigitalOcean Spaces)
    spaces_region: str = Field(default="sgp1", alias="SPACES_REGION")
    space_access_key: str | None = Field(default=None, alias="SPACE_ACCESS_KEY")
    space_secret_key: str | None = Field(default=None, alias="SPACE_SECRET_KEY")
    space_bucket: str = Field(default="", alias="SPACE_BUCKET")
    presign_ttl_minutes: int = Field(default=15, alias="PRESIGN_TTL_MINUTES")

    # Upload limits
    max_image_upload_mb: int = 32
    max_document_upload_mb: int = 50
    max_logo_upload_mb: int = 5

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
        "extra": "ignore",
    }

    @property
    def database_url(self) -> str:
        return (
            f"postgresql+asyncpg://{quote_plus(self.db_user)}:{quote_plus(self.db_password)}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    @property
    def cors_origins(self) -> list[str]:
        if self.allowed_origins.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @property
    def jwt_algorithm_list(self) -> list[str]:
        return [a.strip() for a in self.jwt_algorithms.split(",") if a.strip()]

    @property
    def spaces_endpoint(self) -> str:
        return f"https://{self.spaces_region}.digitaloceanspaces.com"

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

settings = Settings()
