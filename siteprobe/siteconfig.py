"""
Site 設定解析 (object storage / SMTP relay / hardening)。

從環境變數組出一個完整的 SiteConfig。WORDPRESS_CONFIG_EXTRA 只接受
YAML mapping (常數名稱 -> 純量)，不會被當成程式碼執行。
"""

import os
import re
from collections.abc import Mapping
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict

from .exceptions import ConfigurationError


S3_ENV_KEYS = (
    "S3_UPLOADS_BUCKET",
    "S3_UPLOADS_REGION",
    "S3_UPLOADS_KEY",
    "S3_UPLOADS_SECRET",
    "S3_UPLOADS_ENDPOINT",
    "S3_UPLOADS_USE_PATH_STYLE_ENDPOINT",
)

EXTRA_ENV = "WORDPRESS_CONFIG_EXTRA"
CONSTANT_NAME = re.compile(r"^[A-Z][A-Z0-9_]*$")
MASK = "***"


class S3UploadsConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    bucket: str | None = None
    region: str | None = None
    key: str | None = None
    secret: str | None = None
    endpoint: str | None = None
    use_path_style_endpoint: str | None = None


class SmtpConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    mailer: Literal["smtp"] = "smtp"
    mail_from: str | None = None
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    encryption: Literal["tls", "ssl", "none"] | None = None


class SiteConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    disallow_file_edit: bool = True
    s3: S3UploadsConfig | None = None
    smtp: SmtpConfig | None = None
    extra: dict[str, str | int | float | bool | None] = {}

    def masked(self) -> dict:
        data = self.model_dump()
        if data["s3"] and data["s3"].get("secret"):
            data["s3"]["secret"] = MASK
        if data["s3"] and data["s3"].get("key"):
            data["s3"]["key"] = MASK
        if data["smtp"] and data["smtp"].get("password"):
            data["smtp"]["password"] = MASK
        return data


def _s3_from_env(environ: Mapping[str, str]) -> S3UploadsConfig | None:
    present = {k: environ[k] for k in S3_ENV_KEYS if k in environ}
    if not present:
        return None
    prefix = len("S3_UPLOADS_")
    return S3UploadsConfig(**{k[prefix:].lower(): v for k, v in present.items()})


def _smtp_from_env(environ: Mapping[str, str]) -> SmtpConfig | None:
    if environ.get("WP_SMTP_FORCE") != "true":
        return None

    port = environ.get("SMTP_PORT") or None
    if port is not None:
        try:
            port = int(port)
        except ValueError:
            raise ConfigurationError("SMTP_PORT", f"not an integer: {port!r}")

    secure = (environ.get("SMTP_SECURE") or "").lower() or None
    if secure not in (None, "tls", "ssl", "none"):
        raise ConfigurationError("SMTP_SECURE", f"expected tls/ssl/none, got {secure!r}")

    return SmtpConfig(
        mail_from=environ.get("MAIL_FROM") or None,
        host=environ.get("SMTP_HOST") or None,
        port=port,
        user=environ.get("SMTP_USER") or None,
        password=environ.get("SMTP_PASSWORD") or None,
        encryption=secure,
    )


def parse_config_extra(raw: str | None) -> dict:
    if not raw or not raw.strip():
        return {}

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigurationError(EXTRA_ENV, f"invalid YAML: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(EXTRA_ENV, "expected a mapping of NAME: value")

    for name, value in data.items():
        if not isinstance(name, str) or not CONSTANT_NAME.match(name):
            raise ConfigurationError(EXTRA_ENV, f"invalid constant name {name!r}")
        if value is not None and not isinstance(value, (str, int, float, bool)):
            raise ConfigurationError(EXTRA_ENV, f"{name} must be a scalar value")
    return data


def resolve_site_config(environ: Mapping[str, str] | None = None) -> SiteConfig:
    environ = os.environ if environ is None else environ
    return SiteConfig(
        s3=_s3_from_env(environ),
        smtp=_smtp_from_env(environ),
        extra=parse_config_extra(environ.get(EXTRA_ENV)),
    )
