"""Question selection for each practice mode."""
import logging
import random

from finance_quiz.bank import QuestionBank
from finance_quiz.config import WRONG_WEIGHT, DEFAULT_WEIGHT
from finance_quiz.models import Mode, Question, QuestionStat
from finance_quiz.stats import get_question_stats

logger = logging.getLogger(__name__)

NO_QUESTIONS = "No questions for the selected weeks."
NOTHING_TO_REVIEW = "No wrong answers to review yet! Try another mode."


class EmptySelection(Exception):
    """The chosen mode and weeks leave nothing to ask."""

    def __init__(self, mode: Mode, message: str):
        super().__init__(message)
        self.mode = mode
        self.message = message


def questions_for_weeks(bank: QuestionBank, weeks) -> list[Question]:
    """Bank-ordered questions for the weeks, each id at most once."""
    seen = set()
    result = []
    for q in bank.questions_for_weeks(weeks):
        if q.id not in seen:
            seen.add(q.id)
            result.append(q)
    return result


def shuffle_questions(questions, rng: random.Random | None = None) -> list[Question]:
    shuffled = list(questions)
    (rng or random).shuffle(shuffled)
    return shuffled


def select_weekly(bank: QuestionBank, weeks) -> list[Question]:
    return questions_for_weeks(bank, weeks)


def select_review(bank: QuestionBank, weeks, db_path: str, rng: random.Random | None = None) -> list[Question]:
    stats = get_question_stats(db_path)
    wrong = [q for q in questions_for_weeks(bank, weeks) if stats.get(q.id, QuestionStat()).was_wrong]
    return shuffle_questions(wrong, rng)


def select_infinite(bank: QuestionBank, weeks) -> list[Question]:
    return questions_for_weeks(bank, weeks)


def select(mode: Mode, weeks, bank: QuestionBank, db_path: str, rng: random.Random | None = None) -> list[Question]:
    """Build the working set for a session.

    Raises EmptySelection when nothing matches, so the caller can stay idle.
    """
    mode = Mode(mode)
    if mode is Mode.WEEKLY:
        questions = select_weekly(bank, weeks)
    elif mode is Mode.REVIEW:
        questions = select_review(bank, weeks, db_path, rng)
    else:
        questions = select_infinite(bank, weeks)
    if not questions:
        raise EmptySelection(mode, NOTHING_TO_REVIEW if mode is Mode.REVIEW else NO_QUESTIONS)
    logger.debug("Selected %d questions for %s mode, weeks %s", len(questions), mode.value, list(weeks))
    return questions


def question_weight(stat: QuestionStat) -> int:
    return WRONG_WEIGHT if stat.was_wrong else DEFAULT_WEIGHT


def weighted_draw(weights, rng: random.Random | None = None) -> int:
    """Index drawn with probability proportional to its weight.

    Walks the candidates in order, subtracting weights from a uniform draw
    over the total until the remainder reaches zero.
    """
    total = sum(weights)
    remainder = (rng or random).random() * total
    for i, weight in enumerate(weights):
        remainder -= weight
        if remainder <= 0:
            return i
    return 0


def draw_from_pool(pool, db_path: str, rng: random.Random | None = None) -> int | None:
    """Pick the next pool index, favouring questions answered wrong before."""
    if not pool:
        return None
    stats = get_question_stats(db_path)
    weights = [question_weight(stats.get(q.id, QuestionStat())) for q in pool]
    return weighted_draw(weights, rng)
