"""Persistent per-question answer statistics."""
import json
import logging
import sqlite3

from finance_quiz.config import STATS_KEY
from finance_quiz.db import get_connection, init_db, get_setting, set_setting, delete_setting
from finance_quiz.models import QuestionStat, OverallStats

logger = logging.getLogger(__name__)


def empty_stats() -> dict:
    return {"questionStats": {}, "totalSolved": 0, "totalCorrect": 0}


def _parse(raw: str | None) -> dict:
    """Decode a stored payload, falling back to an empty store on bad data."""
    if not raw:
        return empty_stats()
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Stored statistics are unreadable, starting from empty")
        return empty_stats()
    if not isinstance(data, dict) or not isinstance(data.get("questionStats", {}), dict):
        logger.warning("Stored statistics have an unexpected shape, starting from empty")
        return empty_stats()
    stats = empty_stats()
    try:
        stats["totalSolved"] = int(data.get("totalSolved") or 0)
        stats["totalCorrect"] = int(data.get("totalCorrect") or 0)
        for qid, entry in data.get("questionStats", {}).items():
            if not isinstance(entry, dict):
                continue
            stats["questionStats"][str(qid)] = {
                "correct": int(entry.get("correct") or 0),
                "wrong": int(entry.get("wrong") or 0),
            }
    except (TypeError, ValueError):
        logger.warning("Stored statistics hold non-numeric counters, starting from empty")
        return empty_stats()
    return stats


def load_stats(db_path: str) -> dict:
    try:
        raw = get_setting(db_path, STATS_KEY)
    except sqlite3.DatabaseError as e:
        # Missing table or a file that is not a database at all
        logger.warning("Statistics store at %s is unreadable (%s), starting from empty", db_path, e)
        return empty_stats()
    return _parse(raw)


def save_stats(db_path: str, stats: dict) -> None:
    set_setting(db_path, STATS_KEY, json.dumps(stats))


def get_question_stat(db_path: str, question_id: str) -> QuestionStat:
    entry = load_stats(db_path)["questionStats"].get(str(question_id))
    if not entry:
        return QuestionStat()
    return QuestionStat(correct=entry["correct"], wrong=entry["wrong"])


def get_question_stats(db_path: str) -> dict[str, QuestionStat]:
    """All recorded stats keyed by question id."""
    return {
        qid: QuestionStat(correct=entry["correct"], wrong=entry["wrong"])
        for qid, entry in load_stats(db_path)["questionStats"].items()
    }


def record_attempt(db_path: str, question_id: str, is_correct: bool) -> QuestionStat:
    """Count one attempt for a question and commit it before returning.

    A store that cannot be written is logged and the attempt is counted
    against an empty record without being saved.
    """
    key = str(question_id)
    try:
        return _write_attempt(db_path, key, is_correct)
    except sqlite3.DatabaseError as e:
        logger.warning("Could not record attempt for question %s in %s: %s", key, db_path, e)
        return QuestionStat(correct=int(is_correct), wrong=int(not is_correct))


def _write_attempt(db_path: str, key: str, is_correct: bool) -> QuestionStat:
    init_db(db_path)
    conn = get_connection(db_path)
    try:
        # Read-modify-write under one write lock
        conn.execute("BEGIN IMMEDIATE")
        row = conn.execute("SELECT value FROM user_settings WHERE key = ?", (STATS_KEY,)).fetchone()
        stats = _parse(row["value"] if row else None)
        entry = stats["questionStats"].setdefault(key, {"correct": 0, "wrong": 0})
        if is_correct:
            entry["correct"] += 1
            stats["totalCorrect"] += 1
        else:
            entry["wrong"] += 1
        stats["totalSolved"] += 1
        payload = json.dumps(stats)
        conn.execute(
            "INSERT INTO user_settings (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=?",
            (STATS_KEY, payload, payload),
        )
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
    logger.debug("Recorded %s attempt for question %s", "correct" if is_correct else "wrong", key)
    return QuestionStat(correct=entry["correct"], wrong=entry["wrong"])


def get_overall_stats(db_path: str) -> OverallStats:
    stats = load_stats(db_path)
    return OverallStats(total_solved=stats["totalSolved"], total_correct=stats["totalCorrect"])


def reset_stats(db_path: str) -> None:
    """Forget every recorded attempt."""
    delete_setting(db_path, STATS_KEY)
    logger.info("Statistics cleared")
