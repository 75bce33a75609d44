"""Runtime settings and logging setup."""
import logging
import os
from pathlib import Path

from rich.logging import RichHandler

CONTENT_DIR = Path(__file__).parent / "content"

DEFAULT_DB_PATH = os.getenv(
    "FINANCE_QUIZ_DB_PATH", str(Path.home() / ".finance_quiz" / "quiz.db")
)
DEFAULT_BANK_PATH = os.getenv(
    "FINANCE_QUIZ_BANK_PATH", str(CONTENT_DIR / "questions.json")
)

# Seconds between answering and the explanation screen
FEEDBACK_DELAY = float(os.getenv("FINANCE_QUIZ_FEEDBACK_DELAY", "0.5"))

LOG_LEVEL = os.getenv("FINANCE_QUIZ_LOG_LEVEL", "WARNING")

STATS_KEY = "finance_quiz_stats"

# Selection weights for infinite mode
WRONG_WEIGHT = 3
DEFAULT_WEIGHT = 1


def setup_logging(level: str | None = None) -> None:
    """Route package logging through rich."""
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )
