from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "DeckGuide"
    debug: bool = False

    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    gemini_api_base: str = "https://generativelanguage.googleapis.com/v1beta"

    scryfall_api_base: str = "https://api.scryfall.com"

    # Scryfall asks for 50-100ms between requests
    scryfall_rate_limit_delay: float = 0.1

    http_timeout: float = 30.0

    host: str = "127.0.0.1"
    port: int = 8000


settings = Settings()


# =============================================================================
# OUTBOUND REQUEST HEADERS
# =============================================================================

USER_AGENT = "DeckGuide/1.0"
