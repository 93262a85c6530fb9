"""Settings loader for Rollmark."""

from pathlib import Path
from typing import Any

import tomllib
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _toml_settings_source() -> dict[str, Any]:
    """Load settings from config.toml with keys mapped to Settings fields.

    This source has LOWER priority than env/.env so those can override TOML.
    """
    cfg_path = Path("config.toml")
    if not cfg_path.exists():
        return {}
    with cfg_path.open("rb") as f:
        t = tomllib.load(f)
    dice_cfg = t.get("dice", {}) or {}
    out: dict[str, Any] = {
        "env": t.get("app", {}).get("env", "dev"),
        "dice_history_capacity": dice_cfg.get("history_capacity", 50),
        "dice_rng_seed": dice_cfg.get("rng_seed"),
        "dice_max_count": dice_cfg.get("max_count", 1000),
        # Logging config
        "logging_level": t.get("logging", {}).get("level", "INFO"),
        "logging_file_path": t.get("logging", {}).get("file_path", "logs/rollmark.jsonl"),
        "logging_max_bytes": t.get("logging", {}).get("max_bytes", 5_000_000),
        "logging_backup_count": t.get("logging", {}).get("backup_count", 5),
    }

    log_cfg = t.get("logging", {}) or {}
    # Per-handler levels: strings INFO|DEBUG|WARNING|ERROR|CRITICAL|NONE
    # Booleans map True -> overall level, False -> NONE
    overall = str(out["logging_level"]).upper()
    out["logging_level"] = overall

    def _norm_level(v, default):
        if isinstance(v, str):
            return v.upper()
        if isinstance(v, bool):
            return default if v else "NONE"
        return default

    out["logging_console"] = _norm_level(log_cfg.get("console"), overall)
    file_val = log_cfg.get("to_file")
    out["logging_file"] = _norm_level(file_val, overall) if file_val is not None else "NONE"
    return out


class Settings(BaseSettings):
    env: str = Field(default="dev")

    # --- Dice ---
    dice_history_capacity: int = Field(default=50, ge=1)
    # Notations asking for more dice than this are rejected by the parser
    dice_max_count: int = Field(default=1000, ge=1)
    # When set, rollers built from settings replay the same sequence each run
    dice_rng_seed: int | None = None

    # --- Logging ---
    logging_level: str = "INFO"
    logging_console: str = "INFO"
    logging_file: str = "NONE"
    logging_file_path: str = "logs/rollmark.jsonl"
    logging_max_bytes: int = 5_000_000
    logging_backup_count: int = 5

    model_config = SettingsConfigDict(
        env_prefix="ROLLMARK_",
        case_sensitive=False,
        env_file=".env",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Precedence (highest to lowest):
        # 1) init_settings (explicit overrides in code/tests)
        # 2) dotenv (.env in cwd)
        # 3) env_settings (OS env)
        # 4) TOML (config.toml)
        # 5) file_secret_settings
        return (
            init_settings,
            dotenv_settings,
            env_settings,
            _toml_settings_source,
            file_secret_settings,
        )


def load_settings() -> Settings:
    return Settings()
