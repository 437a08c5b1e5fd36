"""XDG config loading/saving."""

from __future__ import annotations

import os
import sys
from contextlib import suppress
from pathlib import Path
from typing import Annotated, Literal, cast

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing_extensions import TypedDict

if sys.version_info >= (3, 11):
    import tomllib
else:  # pragma: no cover
    import tomli as tomllib

from telereg.logging import normalize_level
from telereg.tariffs import DEFAULT_TARIFFS, ClientType, TariffPolicy, TariffTable

DEFAULT_CONFIG_PATH = Path("~/.config/telereg/config.toml").expanduser()
DEFAULT_LOG_LEVEL: Literal["DEBUG", "INFO", "WARN", "ERROR"] = "INFO"
DEFAULT_CLIENT_TYPE: Literal["NORMAL", "GOLD", "PLATINUM"] = "NORMAL"
LOG_LEVEL_ENV = "TELEREG_LOG_LEVEL"

_VALID_CLIENT_TYPES = {item.value for item in ClientType}
_TARIFF_FIELDS = (
    "text_short",
    "text_medium",
    "text_long",
    "text_long_per_char",
    "voice",
    "video",
    "friend_discount",
)


_Amount = Annotated[float, Field(ge=0)]


class TariffConfig(TypedDict, total=False):
    text_short: _Amount
    text_medium: _Amount
    text_long: _Amount
    text_long_per_char: _Amount
    voice: _Amount
    video: _Amount
    friend_discount: Annotated[float, Field(ge=0, le=1)]


class AppConfig(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    log_level: Literal["DEBUG", "INFO", "WARN", "ERROR"] = DEFAULT_LOG_LEVEL
    notifications_default: bool = True
    default_client_type: Literal["NORMAL", "GOLD", "PLATINUM"] = DEFAULT_CLIENT_TYPE
    tier_review_enabled: bool = True
    tariffs: dict[str, TariffConfig] = Field(default_factory=dict)

    @field_validator("tariffs")
    @classmethod
    def _validate_tariffs(cls, value: dict[str, TariffConfig]) -> dict[str, TariffConfig]:
        for name in value:
            if name not in _VALID_CLIENT_TYPES:
                raise ValueError(f"Invalid client type in tariffs: {name}")
        return value


def get_config_path(path: str | Path | None = None) -> Path:
    if path is None:
        return DEFAULT_CONFIG_PATH
    return Path(path).expanduser()


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _toml_scalar(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return f'"{_escape(value)}"'
    raise TypeError(f"Unsupported TOML scalar type: {type(value)!r}")


def _normalize_tariffs(value: object) -> dict[str, TariffConfig]:
    if not isinstance(value, dict):
        return {}
    normalized: dict[str, TariffConfig] = {}
    for name, payload in value.items():
        if not isinstance(name, str) or not isinstance(payload, dict):
            continue
        tier = name.strip().upper()
        if tier not in _VALID_CLIENT_TYPES:
            continue
        entry: TariffConfig = {}
        for field_name in _TARIFF_FIELDS:
            amount = payload.get(field_name)
            if isinstance(amount, bool) or not isinstance(amount, (int, float)) or amount < 0:
                continue
            if field_name == "friend_discount" and amount > 1:
                continue
            entry[field_name] = float(amount)  # type: ignore[literal-required]
        normalized[tier] = entry
    return normalized


def _sanitize(raw: dict[str, object]) -> AppConfig:
    cfg = AppConfig()

    log_level = raw.get("log_level", cfg.log_level)
    normalized_level = normalize_level(log_level) if isinstance(log_level, str) else None
    if normalized_level is not None:
        cfg.log_level = cast(Literal["DEBUG", "INFO", "WARN", "ERROR"], normalized_level)

    notifications_default = raw.get("notifications_default", cfg.notifications_default)
    if isinstance(notifications_default, bool):
        cfg.notifications_default = notifications_default

    default_client_type = raw.get("default_client_type", cfg.default_client_type)
    if isinstance(default_client_type, str) and default_client_type.upper() in _VALID_CLIENT_TYPES:
        cfg.default_client_type = cast(
            Literal["NORMAL", "GOLD", "PLATINUM"],
            default_client_type.upper(),
        )

    tier_review_enabled = raw.get("tier_review_enabled", cfg.tier_review_enabled)
    if isinstance(tier_review_enabled, bool):
        cfg.tier_review_enabled = tier_review_enabled

    cfg.tariffs = _normalize_tariffs(raw.get("tariffs", {}))
    return cfg


def _apply_env(cfg: AppConfig) -> AppConfig:
    env_level = normalize_level(os.getenv(LOG_LEVEL_ENV, ""))
    if env_level is not None:
        cfg.log_level = cast(Literal["DEBUG", "INFO", "WARN", "ERROR"], env_level)
    return cfg


def load_config(path: str | Path | None = None) -> AppConfig:
    resolved = get_config_path(path)
    if not resolved.exists():
        return _apply_env(AppConfig())
    try:
        with resolved.open("rb") as handle:
            raw = tomllib.load(handle)
    except (tomllib.TOMLDecodeError, OSError):
        return _apply_env(AppConfig())
    if not isinstance(raw, dict):
        return _apply_env(AppConfig())
    return _apply_env(_sanitize(raw))


def save_config(config: AppConfig, path: str | Path | None = None) -> Path:
    resolved = get_config_path(path)
    resolved.parent.mkdir(parents=True, exist_ok=True)

    lines = [
        f"log_level = {_toml_scalar(config.log_level)}",
        f"notifications_default = {_toml_scalar(config.notifications_default)}",
        f"default_client_type = {_toml_scalar(config.default_client_type)}",
        f"tier_review_enabled = {_toml_scalar(config.tier_review_enabled)}",
    ]

    for name, payload in sorted(_normalize_tariffs(config.tariffs).items()):
        lines.extend(["", f"[tariffs.{name}]"])
        for field_name in _TARIFF_FIELDS:
            if field_name in payload:
                lines.append(f"{field_name} = {_toml_scalar(payload[field_name])}")  # type: ignore[literal-required]

    resolved.write_text("\n".join(lines) + "\n", encoding="utf-8")
    with suppress(OSError):
        resolved.chmod(0o600)
    return resolved


def build_tariff_policy(config: AppConfig) -> TariffPolicy:
    tables: dict[ClientType, TariffTable] = {}
    for client_type, defaults in DEFAULT_TARIFFS.items():
        overrides = config.tariffs.get(client_type.value, {})
        values = {name: overrides.get(name, getattr(defaults, name)) for name in _TARIFF_FIELDS}
        tables[client_type] = TariffTable(**values)
    return TariffPolicy(tables=tables)
