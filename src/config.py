"""
Application configuration management.
"""
import logging
import os
from dataclasses import dataclass, field
from typing import Optional


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


@dataclass
class AppConfig:
    """Application configuration with environment overrides."""

    # Environment
    app_env: str = field(default_factory=lambda: os.getenv("APP_ENV", "dev"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    # Upload limits
    max_upload_mb: float = field(default_factory=lambda: _env_float("MAX_UPLOAD_MB", 50.0))

    # Load model
    max_recommended_load: float = field(default_factory=lambda: _env_float("MAX_RECOMMENDED_LOAD", 8.0))
    timeline_months: int = 12
    at_capacity_ratio: float = 0.8  # lower bound of the at-capacity band

    # baseline | filtered
    capacity_filter_basis: str = field(
        default_factory=lambda: os.getenv("CAPACITY_FILTER_BASIS", "baseline")
    )

    @property
    def at_capacity_threshold(self) -> float:
        return self.max_recommended_load * self.at_capacity_ratio

    @property
    def is_prod(self) -> bool:
        return self.app_env.lower() == "prod"


# Global config instance
config = AppConfig()


def configure_logging(level_name: Optional[str] = None) -> None:
    """Configure root logging for the app and scripts."""
    level_name = level_name or config.log_level
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s %(message)s")


# =============================================================================
# DEAL COLUMNS
# =============================================================================

COL_DEAL_NAME = "Deal Name"
COL_START_DATE = "Contract Start Date"
COL_END_DATE = "Contract End Date"
COL_BUSINESS_LINE = "Primary Business Line"
COL_DEAL_STAGE = "Deal Stage"

# Role column -> role, in expansion order
ROLE_COLUMNS = {
    "Project Lead": "Lead",
    "Project Co-Lead": "Co-Lead",
    "Project Strategic Advisors": "Strategic Advisor",
    "Project Supporting Consultants": "Supporting",
}

DEAL_COLUMNS = [
    COL_DEAL_NAME,
    COL_START_DATE,
    COL_END_DATE,
    COL_BUSINESS_LINE,
    COL_DEAL_STAGE,
]

# Required columns (hard fail if missing). Role columns are not required:
# a missing one reads as empty.
REQUIRED_COLUMNS = {
    "deals": list(DEAL_COLUMNS),
}

# Optional columns (soft warn if missing)
OPTIONAL_COLUMNS = {
    "deals": [
        "Deal Owner",
        "Amount",
        "Company Name",
        "Close Date",
    ],
}


# =============================================================================
# WEIGHTS
# =============================================================================

ROLE_WEIGHTS = {
    "Lead": 1.0,
    "Co-Lead": 0.7,
    "Strategic Advisor": 0.3,
    "Supporting": 0.5,
}

STAGE_WEIGHTS = {
    "On Hold and Introductory Meeting": 0.1,
    "Proposal Requested": 0.3,
    "Proposal Under Review": 0.5,
    "LOE Requested": 0.7,
    "LOE Under Review": 0.9,
    "Prospect": 0.4,
    "Closed Won": 1.0,
    "Follow On": 0.95,
}

CLOSED_WON_STAGE = "Closed Won"

FOLLOW_ON_MARKER = "-Follow On"
FOLLOW_ON_MULTIPLIER = 0.95


# =============================================================================
# FILTER OPTIONS
# =============================================================================

TIMEFRAME_OPTIONS = {
    "all": "All time",
    "3": "Ending within 3 months",
    "6": "Ending within 6 months",
    "12": "Ending within 12 months",
    "24": "Ending within 24 months",
}

CAPACITY_STATUS_OPTIONS = {
    "all": "All",
    "available": "Available",
    "at-capacity": "At capacity",
    "over-capacity": "Over capacity",
}

CAPACITY_FILTER_BASES = ("baseline", "filtered")

INTERNAL_WORK_STEP = 5

# Formatting constants
FORMAT_LOAD = "{:,.1f}"
FORMAT_PERCENT = "{:.0f}%"
FORMAT_COUNT = "{:,}"
MONTH_LABEL_FORMAT = "%b %y"
