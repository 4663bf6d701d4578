from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="CARDCATALOG_")

    app_name: str = "CardCatalog"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "postgresql+asyncpg://localhost:5432/cardcatalog"

    # Reject cards whose subtype belongs to a different type
    enforce_subtype_match: bool = True


settings = Settings()


# =============================================================================
# PAGINATION LIMITS
# =============================================================================

DEFAULT_PAGE_SIZE = 10

# Upper bound accepted on list endpoints
MAX_PAGE_SIZE = 100
