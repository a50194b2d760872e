#!/usr/bin/env python3
"""Environment-driven settings (a local .env file is honoured)."""
from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_SID_PREFIX = "GeneratedPolicy"
DEFAULT_OUTPUT_DIR = "policies"
DEFAULT_LOG_LEVEL = "INFO"

_ALNUM = re.compile(r"[a-zA-Z0-9]+")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_DOTENV_LOADED = False


def _ensure_env_loaded() -> None:
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return
    load_dotenv()
    _DOTENV_LOADED = True


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    sid_prefix: str = DEFAULT_SID_PREFIX
    output_dir: Path = Path(DEFAULT_OUTPUT_DIR)
    log_level: str = DEFAULT_LOG_LEVEL
    check_principals: bool = False


def load_settings() -> Settings:
    """Read BUCKET_POLICY_* variables; raise ValueError on unusable values."""
    _ensure_env_loaded()

    sid_prefix = os.getenv("BUCKET_POLICY_SID_PREFIX", DEFAULT_SID_PREFIX).strip()
    # Generated Sids must pass the alphanumeric Sid rule
    if not _ALNUM.fullmatch(sid_prefix):
        raise ValueError(f"BUCKET_POLICY_SID_PREFIX must be alphanumeric, got: {sid_prefix!r}")

    log_level = os.getenv("BUCKET_POLICY_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
    if log_level not in _LOG_LEVELS:
        raise ValueError(f"BUCKET_POLICY_LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}, got: {log_level!r}")

    output_dir = Path(os.getenv("BUCKET_POLICY_OUTPUT_DIR", DEFAULT_OUTPUT_DIR).strip() or DEFAULT_OUTPUT_DIR)

    return Settings(
        sid_prefix=sid_prefix,
        output_dir=output_dir,
        log_level=log_level,
        check_principals=_env_flag("BUCKET_POLICY_CHECK_PRINCIPALS"),
    )
