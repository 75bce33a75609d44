"""Tests for answer checking."""
import itertools
import random

import pytest

from finance_quiz.evaluator import (
    shuffle_options, normalize_answer, evaluate, correct_answer_text, user_answer_text,
)
from finance_quiz.models import (
    Question, QuestionType, OptionShuffle, Select, SelectBoolean, SubmitText, Skip,
)

MC = Question(id="mc", week="1", type=QuestionType.MULTIPLE, question="?",
              options=("alpha", "beta", "gamma", "delta"), answer=2)
OX = Question(id="ox", week="1", type=QuestionType.OX, question="?", answer=False)
FILL = Question(id="fill", week="1", type=QuestionType.FILL, question="Capital of Korea?",
                answer="seoul", alternatives=("Seoul City",))


def test_shuffle_tracks_correct_option():
    shuffle = shuffle_options(MC.options, MC.answer, random.Random(1))
    assert sorted(shuffle.options) == sorted(MC.options)
    assert shuffle.options[shuffle.answer_index] == "gamma"
    for original, pos in shuffle.original_to_shuffled.items():
        assert shuffle.options[pos] == MC.options[original]


def test_multiple_choice_correct_for_every_permutation():
    """Picking the authored answer is right whatever the display order."""
    for order in itertools.permutations(range(4)):
        mapping = {original: pos for pos, original in enumerate(order)}
        shuffle = OptionShuffle(
            options=tuple(MC.options[i] for i in order),
            answer_index=mapping[MC.answer],
            original_to_shuffled=mapping,
        )
        chosen = mapping[MC.answer]
        assert evaluate(MC, Select(chosen), shuffle).is_correct
        for other in range(4):
            if other != chosen:
                assert not evaluate(MC, Select(other), shuffle).is_correct


def test_multiple_choice_skip():
    shuffle = shuffle_options(MC.options, MC.answer, random.Random(0))
    result = evaluate(MC, Skip(), shuffle)
    assert not result.is_correct
    assert result.is_skip


def test_multiple_choice_out_of_range_index_rejected():
    shuffle = shuffle_options(MC.options, MC.answer, random.Random(0))
    assert evaluate(MC, Select(4), shuffle) is None
    assert evaluate(MC, Select(-1), shuffle) is None


def test_boolean_exact_match():
    assert evaluate(OX, SelectBoolean(False)).is_correct
    assert not evaluate(OX, SelectBoolean(True)).is_correct


def test_boolean_skip_is_wrong():
    result = evaluate(OX, Skip())
    assert not result.is_correct
    assert result.is_skip


@pytest.mark.parametrize("submitted", ["  Seoul ", "SEOUL", "seoul", "s e o u l", "seoulcity", "Seoul City"])
def test_free_text_matches(submitted):
    assert evaluate(FILL, SubmitText(submitted)).is_correct


def test_free_text_wrong_guess():
    result = evaluate(FILL, SubmitText("Busan"))
    assert not result.is_correct
    assert not result.is_skip


@pytest.mark.parametrize("submitted", ["", "   ", "\t"])
def test_free_text_empty_is_skip(submitted):
    result = evaluate(FILL, SubmitText(submitted))
    assert not result.is_correct
    assert result.is_skip


def test_free_text_skip_event():
    result = evaluate(FILL, Skip())
    assert not result.is_correct
    assert result.is_skip


def test_mismatched_events_rejected():
    assert evaluate(OX, Select(0)) is None
    assert evaluate(FILL, SelectBoolean(True)) is None
    assert evaluate(MC, SubmitText("alpha"), shuffle_options(MC.options, MC.answer)) is None
    assert evaluate(MC, Select(0), None) is None


def test_normalize_answer():
    assert normalize_answer("  Hello  World ") == "helloworld"
    assert normalize_answer(72) == "72"


def test_correct_answer_text():
    assert correct_answer_text(MC) == "gamma"
    assert correct_answer_text(OX) == "X (False)"
    assert correct_answer_text(FILL) == "seoul (or: Seoul City)"


def test_user_answer_text():
    shuffle = OptionShuffle(options=("delta", "gamma", "beta", "alpha"), answer_index=1)
    assert user_answer_text(MC, 0, shuffle) == "delta"
    assert user_answer_text(OX, True) == "O (True)"
    assert user_answer_text(FILL, "busan") == "busan"
    assert user_answer_text(FILL, "") == "(no answer)"
