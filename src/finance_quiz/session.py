"""Quiz session state machine.

A QuizSession owns everything about one practice run: the working set from
the selection engine, the question currently on screen, its option shuffle,
and the per-session tallies. The presentation layer drives it with answer
events and reads back DisplayedQuestion / AnswerResult / SessionSummary.

Phases::

    idle -> awaiting_answer -> showing_explanation -> awaiting_answer
                                                   -> complete

Nothing here raises into the caller for expected conditions. An empty
working set keeps the session idle and sets ``notice``; events that do not
fit the current phase or question are ignored and return None.
"""
import logging
import random

from finance_quiz.bank import QuestionBank
from finance_quiz.dashboard import get_result_message, MASTERED_MESSAGE
from finance_quiz.evaluator import (
    shuffle_options, evaluate, correct_answer_text, user_answer_text,
)
from finance_quiz.explanation import extract_diagrams
from finance_quiz.models import (
    Mode, SessionPhase, QuestionType, Question, DisplayedQuestion, AnswerResult,
    SessionSummary, AnswerEvent, Select, SelectBoolean, SubmitText, percent,
)
from finance_quiz.selection import (
    select, shuffle_questions, draw_from_pool, EmptySelection,
)
from finance_quiz.stats import record_attempt, get_question_stat

logger = logging.getLogger(__name__)

SELECT_FIRST = "Select a mode and at least one week first."


class QuizSession:
    def __init__(self, db_path: str, bank: QuestionBank, rng: random.Random | None = None):
        self.db_path = db_path
        self.bank = bank
        self.rng = rng or random.Random()
        self.mode: Mode | None = None
        self.selected_weeks: list[str] = []
        self.notice: str | None = None
        self._reset()

    def _reset(self) -> None:
        self.phase = SessionPhase.IDLE
        self.sequence: list[Question] = []
        self.position = 0
        self.pool: list[Question] = []
        self.pool_size = 0
        self.pool_index: int | None = None
        self.solved_count = 0
        self.correct_count = 0
        self.wrong_list: list[Question] = []
        self.current_question: Question | None = None
        self.answered = False
        self.user_answer = None
        self.option_shuffle = None
        self.last_result: AnswerResult | None = None
        self._view: DisplayedQuestion | None = None

    # --- setup -------------------------------------------------------------

    def configure(self, mode, weeks) -> None:
        """Choose mode and weeks; any running session is dropped."""
        self._reset()
        self.mode = Mode(mode) if mode is not None else None
        self.selected_weeks = list(dict.fromkeys(str(w) for w in weeks))
        self.notice = None

    def start(self) -> bool:
        if self.mode is None or not self.selected_weeks:
            self.notice = SELECT_FIRST
            return False
        try:
            questions = select(self.mode, self.selected_weeks, self.bank, self.db_path, self.rng)
        except EmptySelection as e:
            logger.info("Cannot start %s session: %s", e.mode.value, e.message)
            self._reset()
            self.notice = e.message
            return False
        self.notice = None
        self._begin(questions)
        return True

    def _begin(self, questions: list[Question]) -> None:
        self._reset()
        if self.mode is Mode.INFINITE:
            self.pool = list(questions)
            self.pool_size = len(self.pool)
            self._draw()
        else:
            self.sequence = list(questions)
            self._show(self.sequence[0])
        logger.info("Started %s session with %d questions", self.mode.value, len(questions))

    # --- display -----------------------------------------------------------

    def _draw(self) -> None:
        self.pool_index = draw_from_pool(self.pool, self.db_path, self.rng)
        self._show(self.pool[self.pool_index])

    def _show(self, question: Question) -> None:
        self.current_question = question
        self.answered = False
        self.user_answer = None
        self.last_result = None
        if question.type is QuestionType.MULTIPLE:
            self.option_shuffle = shuffle_options(question.options, question.answer, self.rng)
        else:
            self.option_shuffle = None
        self.phase = SessionPhase.AWAITING_ANSWER

        if self.mode is Mode.INFINITE:
            number = self.solved_count + 1
            total = f"{len(self.pool)} left"
            progress = (self.pool_size - len(self.pool)) / self.pool_size
        else:
            number = self.position + 1
            total = str(len(self.sequence))
            progress = self.position / len(self.sequence)
        self._view = DisplayedQuestion(
            question=question,
            mode_label=self.mode.label,
            number=number,
            total=total,
            progress=progress,
            previously_wrong=get_question_stat(self.db_path, question.id).was_wrong,
            options=self.option_shuffle.options if self.option_shuffle else None,
        )

    def current_view(self) -> DisplayedQuestion | None:
        if self.phase in (SessionPhase.AWAITING_ANSWER, SessionPhase.SHOWING_EXPLANATION):
            return self._view
        return None

    # --- answering ---------------------------------------------------------

    def submit(self, event: AnswerEvent) -> AnswerResult | None:
        """Score the first accepted answer for the current question.

        Later submissions for the same question change nothing and return None.
        """
        if self.phase is not SessionPhase.AWAITING_ANSWER or self.answered:
            logger.debug("Ignoring %r in phase %s", event, self.phase.value)
            return None
        question = self.current_question
        evaluation = evaluate(question, event, self.option_shuffle)
        if evaluation is None:
            logger.debug("Ignoring %r for %s question %s", event, question.type.value, question.id)
            return None

        is_correct = evaluation.is_correct
        # The question stays open until the attempt is recorded
        record_attempt(self.db_path, question.id, is_correct)

        self.answered = True
        if isinstance(event, Select):
            self.user_answer = event.index
        elif isinstance(event, SelectBoolean):
            self.user_answer = event.value
        elif isinstance(event, SubmitText):
            self.user_answer = event.value.strip()
        else:
            self.user_answer = "" if question.type is QuestionType.FILL else None

        removed = False
        if self.mode is Mode.INFINITE:
            self.solved_count += 1
            if is_correct:
                self.correct_count += 1
                self.pool.pop(self.pool_index)
                removed = True
            is_last = not self.pool
        else:
            if is_correct:
                self.correct_count += 1
            else:
                self.wrong_list.append(question)
            is_last = self.position >= len(self.sequence) - 1

        self.phase = SessionPhase.SHOWING_EXPLANATION
        self.last_result = AnswerResult(
            question=question,
            is_correct=is_correct,
            is_skip=evaluation.is_skip,
            user_answer=self.user_answer,
            correct_answer_text=correct_answer_text(question),
            user_answer_text=None if is_correct or evaluation.is_skip
            else user_answer_text(question, self.user_answer, self.option_shuffle),
            diagrams=extract_diagrams(question.explanation),
            removed_from_pool=removed,
            remaining=len(self.pool) if self.mode is Mode.INFINITE else None,
            is_last=is_last,
        )
        return self.last_result

    def next(self) -> bool:
        """Leave the explanation; True when another question is waiting."""
        if self.phase is not SessionPhase.SHOWING_EXPLANATION:
            return False
        if self.mode is Mode.INFINITE:
            if not self.pool:
                self._complete()
                return False
            self._draw()
            return True
        self.position += 1
        if self.position >= len(self.sequence):
            self._complete()
            return False
        self._show(self.sequence[self.position])
        return True

    def _complete(self) -> None:
        self.phase = SessionPhase.COMPLETE
        self.current_question = None
        self.option_shuffle = None
        self._view = None
        summary = self.summary()
        logger.info("Finished %s session: %d/%d", self.mode.value, summary.correct, summary.attempted)

    # --- results -----------------------------------------------------------

    def summary(self) -> SessionSummary | None:
        if self.phase is not SessionPhase.COMPLETE:
            return None
        if self.mode is Mode.INFINITE:
            attempted = self.solved_count
            pct = percent(self.correct_count, attempted)
            return SessionSummary(
                mode=self.mode,
                correct=self.correct_count,
                attempted=attempted,
                percentage=pct,
                wrong_count=attempted - self.correct_count,
                message=MASTERED_MESSAGE,
                can_retry_wrong=False,
            )
        attempted = len(self.sequence)
        pct = percent(self.correct_count, attempted)
        return SessionSummary(
            mode=self.mode,
            correct=self.correct_count,
            attempted=attempted,
            percentage=pct,
            wrong_count=len(self.wrong_list),
            message=get_result_message(pct),
            can_retry_wrong=bool(self.wrong_list),
        )

    def retry_wrong(self) -> bool:
        """Restart with only the questions missed this session (weekly/review)."""
        if self.phase is not SessionPhase.COMPLETE or self.mode is Mode.INFINITE or not self.wrong_list:
            return False
        self._begin(shuffle_questions(self.wrong_list, self.rng))
        return True

    def retry_all(self) -> bool:
        if self.phase is not SessionPhase.COMPLETE:
            return False
        if self.mode is Mode.INFINITE:
            return self.start()
        self._begin(shuffle_questions(self.sequence, self.rng))
        return True

    def return_to_main(self) -> None:
        self._reset()
        self.mode = None
        self.selected_weeks = []
        self.notice = None
