"""HTTP example configuration using pydantic-settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class ExampleSettings(BaseSettings):
    """HTTP example settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="OLLAMA_EXAMPLE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8081
    debug: bool = False

    # Where the provider listens and who we are when calling it
    provider_url: str = "http://localhost:8080"
    component_id: str = "http-example"
    timeout: float | None = 120.0


settings = ExampleSettings()
