"""Runtime configuration for the aspire voice companion."""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(
        env_prefix="ASPIRE_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    app_name: str = "aspire-voice"
    log_level: str = "INFO"

    recognition_lang: str = "en-US"
    tts_endpoint: str = Field(
        default="http://127.0.0.1:8000/api/text-to-speech",
        description="Remote synthesis endpoint consumed by the speech output adapter.",
    )
    prefer_remote_voice: bool = False

    openai_api_key: str = Field(default="", validation_alias=AliasChoices("ASPIRE_OPENAI_API_KEY", "OPENAI_API_KEY"))
    gateway_api_key: str = Field(default="", validation_alias=AliasChoices("ASPIRE_GATEWAY_API_KEY", "LOVABLE_API_KEY"))
    beyond_presence_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("ASPIRE_BEYOND_PRESENCE_API_KEY", "BEYOND_PRESENCE_API_KEY"),
    )

    openai_base_url: str = "https://api.openai.com/v1"
    gateway_base_url: str = "https://ai.gateway.lovable.dev/v1"
    avatar_base_url: str = "https://api.bey.dev/v1"

    openai_chat_model: str = "gpt-4o-mini"
    gateway_chat_model: str = "google/gemini-2.5-flash"
    chat_max_tokens: int = 150
    chat_temperature: float = 0.8

    tts_model: str = "tts-1"
    tts_voice: str = "nova"
    http_timeout_seconds: float = 30.0


settings = Settings()
