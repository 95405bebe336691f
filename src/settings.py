"""Static configuration for dayscope.

All user-editable settings (database, analysis horizons, logging) live in a
single JSON file for quick edits without touching Python.
"""

import json
import os

from dotenv import load_dotenv

from core.config import AnalysisConfig

load_dotenv()

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# DAYSCOPE_CONFIG points at an alternate config file (e.g. per environment).
CONFIG_PATH = os.getenv("DAYSCOPE_CONFIG") or os.path.join(PROJECT_ROOT, "config.json")


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _resolve_path(path: str) -> str:
    if os.path.isabs(path):
        return path
    return os.path.join(PROJECT_ROOT, path)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Where to store the SQLite database; DAYSCOPE_DB_PATH wins over config.json.
_database = _CONFIG.get("database", {})
DB_PATH = os.getenv("DAYSCOPE_DB_PATH") or _resolve_path(_database.get("path", "dayscope.db"))

# Analysis horizons:
# - weeks: weeks scanned by the multi-input analysis
# - verifier_weeks: weeks scanned by the single-day verifier
# - max_concurrency: weeks of one set queried at once (1 = sequential)
_analysis = _CONFIG.get("analysis", {})
ANALYSIS_WEEKS = int(_analysis.get("weeks", 6))
VERIFIER_WEEKS = int(_analysis.get("verifier_weeks", 7))
MAX_CONCURRENCY = int(_analysis.get("max_concurrency", 1))

# Default output mode for reports: "text" or "markdown".
REPORT_FORMAT = _CONFIG.get("report", {}).get("format", "text")

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})


def analysis_config() -> AnalysisConfig:
    return AnalysisConfig(
        weeks=ANALYSIS_WEEKS,
        verifier_weeks=VERIFIER_WEEKS,
        max_concurrency=MAX_CONCURRENCY,
    )
