"""Data classes for the quiz domain model."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class QuestionType(str, Enum):
    MULTIPLE = "multiple"
    OX = "ox"
    FILL = "fill"

    @property
    def label(self) -> str:
        return {"multiple": "Multiple choice", "ox": "O/X", "fill": "Fill in"}[self.value]


class Mode(str, Enum):
    WEEKLY = "weekly"
    REVIEW = "review"
    INFINITE = "infinite"

    @property
    def label(self) -> str:
        return {"weekly": "Weekly", "review": "Review", "infinite": "Infinite"}[self.value]


class SessionPhase(str, Enum):
    IDLE = "idle"
    AWAITING_ANSWER = "awaiting_answer"
    SHOWING_EXPLANATION = "showing_explanation"
    COMPLETE = "complete"


@dataclass(frozen=True)
class Question:
    id: str
    week: str
    type: QuestionType
    question: str
    answer: Union[int, bool, str]
    options: tuple = ()
    alternatives: tuple = ()
    explanation: str = ""
    tip: Optional[str] = None


@dataclass
class QuestionStat:
    correct: int = 0
    wrong: int = 0

    @property
    def was_wrong(self) -> bool:
        return self.wrong > 0


@dataclass
class OverallStats:
    total_solved: int = 0
    total_correct: int = 0

    @property
    def accuracy(self) -> int:
        return percent(self.total_correct, self.total_solved)


# Input events consumed by the session


@dataclass(frozen=True)
class Select:
    index: int


@dataclass(frozen=True)
class SelectBoolean:
    value: bool


@dataclass(frozen=True)
class SubmitText:
    value: str


@dataclass(frozen=True)
class Skip:
    pass


AnswerEvent = Union[Select, SelectBoolean, SubmitText, Skip]


@dataclass(frozen=True)
class OptionShuffle:
    options: tuple
    answer_index: int
    original_to_shuffled: dict = field(default_factory=dict)


@dataclass(frozen=True)
class Evaluation:
    is_correct: bool
    is_skip: bool = False


@dataclass
class DisplayedQuestion:
    question: Question
    mode_label: str
    number: int
    total: str
    progress: float
    previously_wrong: bool = False
    options: Optional[tuple] = None


@dataclass
class AnswerResult:
    question: Question
    is_correct: bool
    is_skip: bool
    user_answer: object
    correct_answer_text: str
    user_answer_text: Optional[str] = None
    diagrams: list = field(default_factory=list)
    removed_from_pool: bool = False
    remaining: Optional[int] = None
    is_last: bool = False


@dataclass
class SessionSummary:
    mode: Mode
    correct: int
    attempted: int
    percentage: int
    wrong_count: int
    message: str
    can_retry_wrong: bool = False


def percent(part: int, whole: int) -> int:
    """Percentage rounded half-up, 0 for an empty whole."""
    if whole <= 0:
        return 0
    return int(part * 100 / whole + 0.5)
