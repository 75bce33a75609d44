"""Answer checking for each question type."""
import random
import re

from finance_quiz.models import (
    Question, QuestionType, OptionShuffle, Evaluation,
    AnswerEvent, Select, SelectBoolean, SubmitText, Skip,
)

_WHITESPACE = re.compile(r"\s+")

SKIPPED_TEXT = "(no answer)"


def shuffle_options(options, answer: int, rng: random.Random | None = None) -> OptionShuffle:
    """Randomize display order and track where the correct option lands."""
    rng = rng or random.Random()
    order = list(range(len(options)))
    rng.shuffle(order)
    original_to_shuffled = {original: pos for pos, original in enumerate(order)}
    return OptionShuffle(
        options=tuple(options[i] for i in order),
        answer_index=original_to_shuffled[answer],
        original_to_shuffled=original_to_shuffled,
    )


def normalize_answer(text: str) -> str:
    return _WHITESPACE.sub("", str(text).lower())


def check_text(question: Question, submitted: str) -> Evaluation:
    if not submitted.strip():
        return Evaluation(is_correct=False, is_skip=True)
    given = normalize_answer(submitted)
    candidates = (question.answer,) + tuple(question.alternatives)
    return Evaluation(is_correct=any(normalize_answer(c) == given for c in candidates))


def evaluate(question: Question, event: AnswerEvent, shuffle: OptionShuffle | None = None) -> Evaluation | None:
    """Score one answer event.

    Returns None when the event does not fit the question, e.g. a boolean
    for a multiple-choice question or an index outside the displayed options.
    """
    if isinstance(event, Skip):
        return Evaluation(is_correct=False, is_skip=True)

    if question.type is QuestionType.OX:
        if not isinstance(event, SelectBoolean):
            return None
        return Evaluation(is_correct=event.value == question.answer)

    if question.type is QuestionType.FILL:
        if not isinstance(event, SubmitText):
            return None
        return check_text(question, event.value)

    if not isinstance(event, Select) or shuffle is None:
        return None
    if not 0 <= event.index < len(shuffle.options):
        return None
    return Evaluation(is_correct=event.index == shuffle.answer_index)


def format_bool(value: bool) -> str:
    return "O (True)" if value else "X (False)"


def correct_answer_text(question: Question) -> str:
    if question.type is QuestionType.OX:
        return format_bool(question.answer)
    if question.type is QuestionType.FILL:
        text = question.answer
        if question.alternatives:
            text += f" (or: {', '.join(question.alternatives)})"
        return text
    return question.options[question.answer]


def user_answer_text(question: Question, user_answer, shuffle: OptionShuffle | None = None) -> str:
    """Human-readable form of what the user submitted."""
    if user_answer is None or user_answer == "":
        return SKIPPED_TEXT
    if question.type is QuestionType.OX:
        return format_bool(user_answer)
    if question.type is QuestionType.FILL:
        return str(user_answer)
    if shuffle is not None and isinstance(user_answer, int):
        return shuffle.options[user_answer]
    return str(user_answer)
