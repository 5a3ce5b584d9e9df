from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central settings object.
    Values come from env vars; locally you can use backend/.env.
    """
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Record source: a local JSON file wins over the remote URL
    RECORDS_PATH: str = "db.json"
    RECORDS_URL: str = ""
    RECORDS_TIMEOUT_SECONDS: float = 30.0

    # Used to absolutize protocol-relative and root-relative image URLs
    PAGE_ORIGIN: str = "http://localhost:8000"

    # Listing defaults
    DEFAULT_LIMIT: int = 10
    MAX_PAGES_SHOWN: int = 7

    # Versioning
    APP_VERSION: str = "0.1.0"
    BUILD_ID: str = "dev"

    LOG_LEVEL: str = "INFO"


# other modules import this
settings = Settings()
