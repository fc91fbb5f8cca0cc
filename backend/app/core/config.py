from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=None, extra="ignore")

    ENV: str = "prod"

    # Empty means same-origin: custom avatar paths are served relative to the page
    API_BASE_URL: str = ""
    DISCORD_CDN_BASE_URL: str = "https://cdn.discordapp.com"

    LOG_LEVEL: str = "INFO"

    ALLOWED_HOSTS: str = "localhost,127.0.0.1"
    SECURITY_HEADERS_ENABLED: bool = True

settings = Settings()
