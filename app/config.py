"""
Configuration loader.

- Reads env vars (.env supported by deploy)
- Provides strongly-typed Settings
- Holds model knobs, feature flags & rate limit knobs
"""

from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Optional


def _get(name: str, default: Optional[str] = None) -> str:
    v = os.environ.get(name, default)
    if v is None:
        raise RuntimeError(f"Missing required env: {name}")
    return v


@dataclass(frozen=True)
class Settings:
    SECRET_KEY: str

    # Text generation
    OPENAI_API_KEY: str | None
    OPENAI_MODEL: str            # offer + ad copy
    ENHANCE_MODEL: str           # input polishing
    OPENAI_TIMEOUT: float

    OFFER_TEMPERATURE: float
    OFFER_MAX_TOKENS: int
    ENHANCE_TEMPERATURE: float
    ENHANCE_MAX_TOKENS: int
    AD_TEMPERATURE: float
    AD_MAX_TOKENS: int

    # Feature flags
    FF_ENHANCE_INPUTS: bool

    # Rate limiting
    RATE_LIMIT_PER_MIN: int
    RATE_LIMIT_BURST: int
    PROXY_HOPS: int              # trusted reverse proxies in front of the app

    # Input / logging
    MAX_FIELD_LEN: int
    LOG_DIR: str
    LOG_LEVEL: str


def _to_bool(s: str | None, default: bool = False) -> bool:
    if s is None:
        return default
    return str(s).strip().lower() in {"1", "true", "yes", "on"}


def load_settings(override: dict | None = None) -> Settings:
    o = override or {}
    return Settings(
        SECRET_KEY=o.get("SECRET_KEY", _get("SECRET_KEY", "change-me")),

        OPENAI_API_KEY=o.get("OPENAI_API_KEY", os.environ.get("OPENAI_API_KEY")),
        OPENAI_MODEL=o.get("OPENAI_MODEL", _get("OPENAI_MODEL", "gpt-4")),
        ENHANCE_MODEL=o.get("ENHANCE_MODEL", _get("ENHANCE_MODEL", "gpt-3.5-turbo")),
        OPENAI_TIMEOUT=float(o.get("OPENAI_TIMEOUT", os.environ.get("OPENAI_TIMEOUT", 30))),

        OFFER_TEMPERATURE=float(o.get("OFFER_TEMPERATURE", os.environ.get("OFFER_TEMPERATURE", 0.5))),
        OFFER_MAX_TOKENS=int(o.get("OFFER_MAX_TOKENS", os.environ.get("OFFER_MAX_TOKENS", 200))),
        ENHANCE_TEMPERATURE=float(o.get("ENHANCE_TEMPERATURE", os.environ.get("ENHANCE_TEMPERATURE", 0.4))),
        ENHANCE_MAX_TOKENS=int(o.get("ENHANCE_MAX_TOKENS", os.environ.get("ENHANCE_MAX_TOKENS", 120))),
        AD_TEMPERATURE=float(o.get("AD_TEMPERATURE", os.environ.get("AD_TEMPERATURE", 0.7))),
        AD_MAX_TOKENS=int(o.get("AD_MAX_TOKENS", os.environ.get("AD_MAX_TOKENS", 500))),

        FF_ENHANCE_INPUTS=_to_bool(o.get("FF_ENHANCE_INPUTS", os.environ.get("FF_ENHANCE_INPUTS")), True),

        RATE_LIMIT_PER_MIN=int(o.get("RATE_LIMIT_PER_MIN", os.environ.get("RATE_LIMIT_PER_MIN", 60))),
        RATE_LIMIT_BURST=int(o.get("RATE_LIMIT_BURST", os.environ.get("RATE_LIMIT_BURST", 20))),
        PROXY_HOPS=int(o.get("PROXY_HOPS", os.environ.get("PROXY_HOPS", 0))),

        MAX_FIELD_LEN=int(o.get("MAX_FIELD_LEN", os.environ.get("MAX_FIELD_LEN", 2000))),
        LOG_DIR=o.get("LOG_DIR", os.environ.get("LOG_DIR", "logs")),
        LOG_LEVEL=o.get("LOG_LEVEL", os.environ.get("LOG_LEVEL", "INFO")).upper(),
    )
