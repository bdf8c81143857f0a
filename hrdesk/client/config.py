"""Client configuration via environment variables (``HRDESK_`` prefix)."""

from pydantic_settings import BaseSettings


class ClientSettings(BaseSettings):
    """Settings for talking to the HR Desk API. No server secrets required."""

    API_BASE_URL: str = "http://localhost:8000/api/v1"
    CLIENT_TIMEOUT_SECONDS: float = 15.0

    class Config:
        env_prefix = "HRDESK_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


client_settings = ClientSettings()
