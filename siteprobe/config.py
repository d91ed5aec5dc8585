import os

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_CACHE_HOST = "redis"


def load_from_file_or_env(path: str | None, value: str | None) -> str | None:
    # Docker/Vault secrets 檔案優先於環境變數
    if path and os.path.exists(path):
        with open(path, "r", encoding="utf-8") as f:
            return f.read().strip()
    return value


class Settings(BaseSettings):
    """
    Probe 設定，每個 request 重新從環境變數解析。

    沒設定的選用項目 (cache host, token) 只會關掉對應的檢查，不會報錯。
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Database
    db_url: str | None = Field(None, validation_alias=AliasChoices("HEALTHZ_DB_URL"))
    db_host: str = Field("mariadb", validation_alias=AliasChoices("WORDPRESS_DB_HOST"))
    db_user: str = Field(
        "",
        validation_alias=AliasChoices("WORDPRESS_DB_USER", "SERVICE_USER_WORDPRESS"),
    )
    db_password: str = Field(
        "",
        validation_alias=AliasChoices("WORDPRESS_DB_PASSWORD", "SERVICE_PASSWORD_WORDPRESS"),
    )
    db_password_file: str | None = Field(
        None, validation_alias=AliasChoices("WORDPRESS_DB_PASSWORD_FILE")
    )
    db_name: str = Field("wordpress", validation_alias=AliasChoices("WORDPRESS_DB_NAME"))
    db_timeout: float = Field(2.0, gt=0, validation_alias=AliasChoices("HEALTHZ_DB_TIMEOUT"))
    # MySQL 5.7+ 的 SELECT 時間上限 (ms)，0 = 不設定
    db_max_execution_ms: int = Field(
        1000, ge=0, validation_alias=AliasChoices("HEALTHZ_DB_MAX_EXECUTION_MS")
    )

    # Cache (Redis)
    cache_enabled: bool = Field(False, validation_alias=AliasChoices("HEALTHZ_CHECK_REDIS"))
    cache_host: str | None = Field(None, validation_alias=AliasChoices("WP_REDIS_HOST"))
    cache_port: int = Field(6379, validation_alias=AliasChoices("WP_REDIS_PORT"))
    cache_password: str | None = Field(None, validation_alias=AliasChoices("WP_REDIS_PASSWORD"))
    cache_timeout: float = Field(
        1.0, gt=0, validation_alias=AliasChoices("HEALTHZ_CACHE_TIMEOUT")
    )

    # Probe access / behaviour
    token: str | None = Field(None, validation_alias=AliasChoices("HEALTHZ_TOKEN"))
    maintenance_file: str = Field(
        ".maintenance", validation_alias=AliasChoices("HEALTHZ_MAINTENANCE_FILE")
    )
    maintenance: bool = Field(False, validation_alias=AliasChoices("HEALTHZ_MAINTENANCE"))
    deadline: float = Field(2.5, gt=0, validation_alias=AliasChoices("HEALTHZ_DEADLINE"))

    # Canonical host guard
    primary_domain: str | None = Field(None, validation_alias=AliasChoices("PRIMARY_DOMAIN"))
    force_https: bool = Field(False, validation_alias=AliasChoices("FORCE_HTTPS"))

    log_level: str = Field("INFO", validation_alias=AliasChoices("LOG_LEVEL"))

    @property
    def database_password(self) -> str:
        return load_from_file_or_env(self.db_password_file, self.db_password) or ""

    @property
    def cache_check_enabled(self) -> bool:
        return self.cache_enabled or bool(self.cache_host)

    @property
    def cache_target(self) -> str:
        return self.cache_host or DEFAULT_CACHE_HOST

    @property
    def token_required(self) -> bool:
        return bool(self.token)

    @property
    def canonical_redirect_enabled(self) -> bool:
        return bool(self.primary_domain) or self.force_https


def get_settings() -> Settings:
    # FastAPI dependency：每次 request 都重新讀環境變數
    return Settings()
