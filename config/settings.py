"""Configuration loader."""
import os
from pathlib import Path
from dotenv import load_dotenv

ROOT_DIR = Path(__file__).parent.parent

load_dotenv(ROOT_DIR / ".env")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# none / unset -> CSV file under DATA_DIR
DATABASE_URL = os.getenv("DATABASE_URL", "none").strip()
DATA_DIR = Path(os.getenv("DATA_DIR", str(ROOT_DIR / "data")))

HISTORY_LIMIT = int(os.getenv("HISTORY_LIMIT", "50"))

ANALYSIS_TIMEOUT_SECONDS = float(os.getenv("ANALYSIS_TIMEOUT_SECONDS", "10"))
SIMULATE_LATENCY = os.getenv("SIMULATE_LATENCY", "false").lower() in ("1", "true", "yes")

_seed = os.getenv("RANDOM_SEED", "").strip()
RANDOM_SEED = int(_seed) if _seed else None

SUPPORTED_CHART_PERIODS = (7, 30)


def parse_chart_period(raw: str) -> int:
    """Chart length in days; only 7 and 30 are supported."""
    try:
        days = int(raw)
    except ValueError:
        raise ValueError(f"CHART_PERIOD_DAYS must be an integer, got {raw!r}")
    if days not in SUPPORTED_CHART_PERIODS:
        raise ValueError(f"CHART_PERIOD_DAYS must be one of {SUPPORTED_CHART_PERIODS}, got {days}")
    return days


CHART_PERIOD_DAYS = parse_chart_period(os.getenv("CHART_PERIOD_DAYS", "30"))

# Per-producer latency windows (seconds), used only when SIMULATE_LATENCY is on
LATENCY_WINDOWS = {
    "market":     (0.5, 1.5),
    "news":       (0.3, 0.8),
    "chart":      (0.4, 1.0),
    "indicators": (0.2, 0.6),
}
