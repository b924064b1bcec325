"""Configuration loader.

Reads environment variables and `.env` to configure the scraper.  Values
that depend on the current time (the default output file) are resolved
once per run by :func:`resolve_run_config`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv


def load_env_files() -> None:
    """Load `.env` from the working directory (or a parent), then the project root.

    Already-set environment variables win over both files.
    """
    cwd_env = find_dotenv(usecwd=True)
    if cwd_env:
        load_dotenv(cwd_env)
    load_dotenv(dotenv_path=Path(__file__).resolve().parents[1] / ".env")


load_env_files()


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(name, default)


def _parse_int(value: Optional[str], default: int) -> int:
    try:
        return int(value) if value is not None else default
    except ValueError:
        return default


# ---- Core scraping config ----------------------------------------------------

DEFAULT_URL: str = "https://texte.wien/texte.html"

# Listing page to scrape when no URL is passed on the command line.
PAGE_URL: str = _get_env("PAGE_URL", DEFAULT_URL) or DEFAULT_URL

# Directory holding the yearly `<year>-scores.json` files.
OUT_DIR: str = _get_env("OUT_DIR", "out") or "out"

# Logging level: DEBUG, INFO, WARNING, ERROR.
LOG_LEVEL: str = _get_env("LOG_LEVEL", "INFO") or "INFO"

# Item selectors. The fallback is tried when the primary matches nothing.
ITEM_SELECTOR: str = _get_env("ITEM_SELECTOR", "ul#textlist li[data-cnt]") or "ul#textlist li[data-cnt]"
FALLBACK_ITEM_SELECTOR: str = _get_env("FALLBACK_ITEM_SELECTOR", "li[data-cnt]") or "li[data-cnt]"

# ---- HTTP --------------------------------------------------------------------

HTTP_TIMEOUT_SECONDS: int = _parse_int(_get_env("HTTP_TIMEOUT_SECONDS", "30"), 30)

# Total attempts for the page fetch. 1 means a failed fetch aborts the run.
FETCH_ATTEMPTS: int = max(1, _parse_int(_get_env("FETCH_ATTEMPTS", "1"), 1))

USER_AGENT: str = _get_env(
    "USER_AGENT",
    "Mozilla/5.0 (compatible; ScoreMonitor/1.0; +https://github.com/)",
) or "Mozilla/5.0 (compatible; ScoreMonitor/1.0; +https://github.com/)"


# ---- Per-run config ----------------------------------------------------------

@dataclass(frozen=True)
class RunConfig:
    page_url: str
    output_path: Path
    started_at: datetime

    @property
    def uses_default_url(self) -> bool:
        return self.page_url == DEFAULT_URL


def default_output_path(started_at: datetime, out_dir: str = OUT_DIR) -> Path:
    """Return `<cwd>/<out_dir>/<year>-scores.json` for the run's start year."""
    return Path.cwd() / out_dir / f"{started_at.year}-scores.json"


def resolve_run_config(
    page_url: Optional[str] = None,
    output_path: Optional[str] = None,
    *,
    now: Optional[datetime] = None,
) -> RunConfig:
    """Freeze the settings for a single run.

    Command-line values win over the environment; the start time is taken
    once here and reused for every timestamp the run writes.
    """
    started_at = now or datetime.now(timezone.utc)
    return RunConfig(
        page_url=page_url or PAGE_URL,
        output_path=Path(output_path) if output_path else default_output_path(started_at),
        started_at=started_at,
    )


__all__ = [
    "load_env_files",
    "DEFAULT_URL",
    "PAGE_URL",
    "OUT_DIR",
    "LOG_LEVEL",
    "ITEM_SELECTOR",
    "FALLBACK_ITEM_SELECTOR",
    "HTTP_TIMEOUT_SECONDS",
    "FETCH_ATTEMPTS",
    "USER_AGENT",
    "RunConfig",
    "default_output_path",
    "resolve_run_config",
]
