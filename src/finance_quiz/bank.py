"""Question bank loading and validation."""
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from finance_quiz.config import DEFAULT_BANK_PATH
from finance_quiz.models import Question, QuestionType

logger = logging.getLogger(__name__)


class QuestionBankError(ValueError):
    """Raised when question content cannot be used by the quiz."""


@dataclass(frozen=True)
class WeekInfo:
    tag: str
    name: str
    short_name: str = ""


@dataclass(frozen=True)
class QuestionBank:
    questions: tuple
    week_info: dict = field(default_factory=dict)

    def weeks(self) -> list[str]:
        """Week tags in the order they are declared, then any undeclared ones."""
        tags = list(self.week_info)
        for q in self.questions:
            if q.week not in tags:
                tags.append(q.week)
        return tags

    def week_name(self, tag: str) -> str:
        info = self.week_info.get(tag)
        return info.name if info else f"Week {tag}"

    def questions_for_weeks(self, weeks) -> list[Question]:
        selected = set(weeks)
        return [q for q in self.questions if q.week in selected]

    def count_for_week(self, tag: str) -> int:
        return sum(1 for q in self.questions if q.week == tag)

    def get(self, question_id: str) -> Question | None:
        for q in self.questions:
            if q.id == question_id:
                return q
        return None

    def __len__(self) -> int:
        return len(self.questions)


def read_bank_file(file_path: str) -> dict:
    path = Path(file_path)
    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        import yaml
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    return json.loads(path.read_text(encoding="utf-8"))


def parse_question(raw: dict) -> Question:
    """Build a Question from one raw record, validating type-specific fields."""
    try:
        qid = str(raw["id"])
        week = str(raw["week"])
        text = raw["question"]
        answer = raw["answer"]
    except KeyError as e:
        raise QuestionBankError(f"Question {raw.get('id', '?')} is missing field {e}") from None
    try:
        qtype = QuestionType(raw.get("type", QuestionType.MULTIPLE.value))
    except ValueError:
        raise QuestionBankError(f"Question {qid} has unknown type {raw.get('type')!r}") from None

    options = tuple(raw.get("options") or ())
    alternatives = tuple(str(a) for a in raw.get("alternatives") or ())

    if qtype is QuestionType.MULTIPLE:
        if not options:
            raise QuestionBankError(f"Question {qid} has no options")
        if isinstance(answer, bool) or not isinstance(answer, int) or not 0 <= answer < len(options):
            raise QuestionBankError(f"Question {qid} answer {answer!r} is not an index into its options")
    elif qtype is QuestionType.OX:
        if not isinstance(answer, bool):
            raise QuestionBankError(f"Question {qid} needs a true/false answer")
    else:
        answer = str(answer)
        if not answer.strip():
            raise QuestionBankError(f"Question {qid} has an empty answer")

    return Question(
        id=qid,
        week=week,
        type=qtype,
        question=text,
        answer=answer,
        options=options,
        alternatives=alternatives,
        explanation=raw.get("explanation") or "",
        tip=raw.get("tip") or None,
    )


def build_bank(data: dict) -> QuestionBank:
    """Validate raw bank data and return an immutable QuestionBank."""
    if not isinstance(data, dict) or not isinstance(data.get("questions"), list):
        raise QuestionBankError("Question bank must contain a 'questions' list")
    week_info = {}
    for tag, info in (data.get("weeks") or {}).items():
        week_info[str(tag)] = WeekInfo(
            tag=str(tag),
            name=info.get("name", f"Week {tag}"),
            short_name=info.get("short_name", ""),
        )
    questions = []
    seen = set()
    for raw in data["questions"]:
        q = parse_question(raw)
        if q.id in seen:
            raise QuestionBankError(f"Duplicate question id {q.id}")
        seen.add(q.id)
        questions.append(q)
    return QuestionBank(questions=tuple(questions), week_info=week_info)


def load_bank(path: str | None = None) -> QuestionBank:
    """Load the question bank from a JSON or YAML file."""
    path = path or DEFAULT_BANK_PATH
    bank = build_bank(read_bank_file(path))
    logger.info("Loaded %d questions across %d weeks from %s", len(bank), len(bank.weeks()), path)
    return bank
