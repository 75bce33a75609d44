import random

import pytest

from finance_quiz.bank import build_bank
from finance_quiz.models import QuestionType, Select, SelectBoolean, SubmitText


def correct_event(session):
    """An answer event that is right for the session's current question."""
    q = session.current_question
    if q.type is QuestionType.MULTIPLE:
        return Select(session.option_shuffle.answer_index)
    if q.type is QuestionType.OX:
        return SelectBoolean(q.answer)
    return SubmitText(q.answer)


def wrong_event(session):
    q = session.current_question
    if q.type is QuestionType.MULTIPLE:
        shuffle = session.option_shuffle
        return Select((shuffle.answer_index + 1) % len(shuffle.options))
    if q.type is QuestionType.OX:
        return SelectBoolean(not q.answer)
    return SubmitText("definitely not it")


class ScriptedRandom(random.Random):
    """Random whose random() replays a fixed list of values."""

    def __init__(self, values, seed=0):
        super().__init__(seed)
        self.values = list(values)

    def random(self):
        return self.values.pop(0)

    # Keeps shuffle() on the seeded bit source instead of random()
    def getrandbits(self, k):
        return super().getrandbits(k)


SAMPLE_BANK = {
    "weeks": {
        "1": {"name": "Week 1: Economy", "short_name": "Economy"},
        "9": {"name": "Week 9: Credit", "short_name": "Credit"},
    },
    "questions": [
        {"id": "w1-mc", "week": "1", "type": "multiple", "question": "Who supplies labour?",
         "options": ["Households", "Firms", "Government", "Foreign sector"], "answer": 0,
         "explanation": "Households supply labour."},
        {"id": "w1-ox", "week": "1", "type": "ox", "question": "Banks are intermediaries.",
         "answer": True, "explanation": "True."},
        {"id": "w9-1", "week": "9", "type": "multiple", "question": "Biggest credit score factor?",
         "options": ["Payment history", "Age", "Income"], "answer": 0, "explanation": "Pay on time."},
        {"id": "w9-2", "week": "9", "type": "ox", "question": "Checking your report lowers your score.",
         "answer": False, "explanation": "Soft inquiry."},
        {"id": "w9-3", "week": "9", "type": "fill", "question": "Not repaying as agreed is a ___.",
         "answer": "default", "alternatives": ["delinquency"], "explanation": "Default."},
        {"id": "w9-4", "week": "9", "type": "multiple", "question": "Keep utilization low by?",
         "options": ["Max out", "Pay in full", "Minimum only", "Open many cards"], "answer": 1,
         "explanation": "Pay in full.\n\n```mermaid\nflowchart LR\n  A --> B\n```"},
        {"id": "w9-5", "week": "9", "type": "ox", "question": "Co-signers are liable.",
         "answer": True, "explanation": "Yes.", "tip": "Think twice before co-signing."},
    ],
}


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_quiz.db")
    return db_path


@pytest.fixture
def bank():
    return build_bank(SAMPLE_BANK)


@pytest.fixture
def scripted_random():
    return ScriptedRandom
