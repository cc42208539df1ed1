from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    tg_token: str = Field("", alias="TG_TOKEN")
    gigachat_token: str = Field("", alias="GIGACHAT_TOKEN")
    gigachat_auth_key: str = Field("", alias="GIGACHAT_AUTH_KEY")
    gigachat_oauth_url: str = Field(
        "https://ngw.devices.sberbank.ru:9443/api/v2/oauth",
        alias="GIGACHAT_OAUTH_URL",
    )
    gigachat_scope: str = Field("GIGACHAT_API_PERS", alias="GIGACHAT_SCOPE")
    gigachat_api_url: str = Field(
        "https://gigachat.devices.sberbank.ru/api/v1",
        alias="GIGACHAT_API_URL",
    )
    gigachat_model: str = Field("GigaChat-2", alias="GIGACHAT_MODEL")
    gigachat_ssl_verify: bool = Field(True, alias="GIGACHAT_SSL_VERIFY")
    gigachat_ca_bundle: str = Field("", alias="GIGACHAT_CA_BUNDLE")
    gigachat_timeout_seconds: float = Field(60.0, alias="GIGACHAT_TIMEOUT_SECONDS")
    gigachat_max_retries: int = Field(3, ge=1, alias="GIGACHAT_MAX_RETRIES")
    image_api_url: str = Field(
        "https://image-generate.www-kokopyaepyae2.workers.dev/generateimage",
        alias="IMAGE_API_URL",
    )
    image_timeout_seconds: float = Field(90.0, alias="IMAGE_TIMEOUT_SECONDS")
    recipe_options_count: int = Field(2, ge=1, le=4, alias="RECIPE_OPTIONS_COUNT")
    recipe_balanced_json_scan: bool = Field(False, alias="RECIPE_BALANCED_JSON_SCAN")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(True, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def gigachat_authorization_key(self) -> str:
        # GIGACHAT_TOKEN may still hold the Basic key in older setups.
        return self.gigachat_auth_key or self.gigachat_token


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
