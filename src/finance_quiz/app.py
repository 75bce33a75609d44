"""Interactive CLI application."""
import logging
import time

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.prompt import Prompt, Confirm
from rich.progress_bar import ProgressBar

from finance_quiz.bank import QuestionBank, QuestionBankError, load_bank
from finance_quiz.config import DEFAULT_DB_PATH, FEEDBACK_DELAY, setup_logging
from finance_quiz.dashboard import get_score_color, get_study_stats, get_week_scores
from finance_quiz.db import init_db
from finance_quiz.explanation import render_explanation, render_diagrams
from finance_quiz.models import (
    Mode, QuestionType, SessionPhase, DisplayedQuestion, AnswerResult, SessionSummary,
    Select, SelectBoolean, SubmitText, Skip,
)
from finance_quiz.session import QuizSession
from finance_quiz.stats import reset_stats

logger = logging.getLogger(__name__)

console = Console()

OPTION_KEYS = ["a", "s", "d", "f"]
SKIP_INPUTS = ("", "?")
TRUE_INPUTS = ("a", "o", "t", "true")
FALSE_INPUTS = ("s", "x", "f", "false")


class SessionExitRequested(Exception):
    """The user asked to leave the running session."""


def session_prompt(prompt: str, **kwargs) -> str:
    """Prompt.ask that treats 'q' and 'menu' as a request to leave the session.

    Leaving needs confirmation; declining asks the original prompt again.
    """
    while True:
        answer = Prompt.ask(prompt, **kwargs)
        if answer.strip().lower() not in ("q", "menu"):
            return answer
        if Confirm.ask("Return to the menu? This session's progress will be lost.", default=False):
            raise SessionExitRequested()


def show_welcome():
    console.print(Panel(
        "[bold]Practical Finance Quiz[/bold]\n[dim]Weekly practice, review and infinite drill[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("weekly", "Every question of the chosen weeks, in order"),
        ("review", "Only questions you have missed before"),
        ("infinite", "Keep going until every question is answered correctly"),
        ("stats", "Progress by week"),
        ("reset", "Clear all recorded answers"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def choose_weeks(bank: QuestionBank) -> list[str]:
    table = Table(title="Weeks")
    table.add_column("Tag", style="cyan", justify="right")
    table.add_column("Topic")
    table.add_column("Questions", justify="right")
    for tag in bank.weeks():
        table.add_row(tag, bank.week_name(tag), str(bank.count_for_week(tag)))
    console.print(table)
    raw = Prompt.ask("Weeks (comma separated, or 'all')", default="all")
    if raw.strip().lower() == "all":
        return bank.weeks()
    known = set(bank.weeks())
    weeks = [w.strip() for w in raw.split(",") if w.strip()]
    unknown = [w for w in weeks if w not in known]
    if unknown:
        console.print(f"[yellow]Ignoring unknown weeks: {', '.join(unknown)}[/yellow]")
    return [w for w in weeks if w in known]


def parse_answer(view: DisplayedQuestion, raw: str):
    """Turn typed input into an answer event, or None if it makes no sense."""
    key = raw.strip().lower()
    qtype = view.question.type
    if qtype is QuestionType.FILL:
        if key == "?":
            return Skip()
        return SubmitText(raw)
    if key in SKIP_INPUTS:
        return Skip()
    if qtype is QuestionType.OX:
        if key in TRUE_INPUTS:
            return SelectBoolean(True)
        if key in FALSE_INPUTS:
            return SelectBoolean(False)
        return None
    if key in OPTION_KEYS[:len(view.options)]:
        return Select(OPTION_KEYS.index(key))
    if key.isdigit() and 1 <= int(key) <= len(view.options):
        return Select(int(key) - 1)
    return None


def show_question(view: DisplayedQuestion) -> None:
    q = view.question
    header = f"[bold]{view.mode_label}[/bold] · {q.type.label} · Q{view.number} / {view.total}"
    if view.previously_wrong:
        header += " · [red]missed before[/red]"
    console.print(header)
    console.print(ProgressBar(total=1.0, completed=view.progress, width=40))
    console.print(Panel(q.question, border_style="cyan"))
    if q.type is QuestionType.MULTIPLE:
        for i, option in enumerate(view.options):
            key = OPTION_KEYS[i].upper() if i < len(OPTION_KEYS) else str(i + 1)
            console.print(f"  [cyan]{key})[/cyan] {option}")
        console.print("  [dim]Enter = don't know[/dim]")
    elif q.type is QuestionType.OX:
        console.print("  [cyan]A)[/cyan] O (True)    [cyan]S)[/cyan] X (False)    [dim]Enter = don't know[/dim]")
    else:
        console.print("  [dim]Type your answer, Enter or ? = don't know[/dim]")


def show_explanation(result: AnswerResult) -> None:
    if result.is_skip:
        console.print("[red]Skipped (counted as wrong)[/red]")
    elif result.is_correct:
        note = " (removed from pool)" if result.removed_from_pool else ""
        console.print(f"[green]Correct!{note}[/green]")
    else:
        note = " (will come back)" if result.remaining is not None else ""
        console.print(f"[red]Incorrect.{note}[/red]")
    console.print(f"Answer: [green]{result.correct_answer_text}[/green]")
    if result.user_answer_text:
        console.print(f"Your answer: [red]{result.user_answer_text}[/red]")
    for renderable in render_explanation(result.question.explanation):
        console.print(renderable)
    # Diagrams go last so a broken one cannot hold up the explanation
    for renderable in render_diagrams(result.diagrams):
        console.print(renderable)
    if result.question.tip:
        console.print(Panel(result.question.tip, title="Tip", border_style="yellow"))


def show_results(summary: SessionSummary) -> None:
    color = get_score_color(summary.percentage)
    console.print(Panel(
        f"[bold]{summary.correct} / {summary.attempted}[/bold]  "
        f"[{color}]{summary.percentage}%[/{color}]\n{summary.message}",
        title="Result", border_style=color,
    ))


def ask_answer(view: DisplayedQuestion):
    while True:
        raw = session_prompt("\nYour answer", default="", show_default=False)
        event = parse_answer(view, raw)
        if event is not None:
            return event
        console.print("[red]Not a valid choice. Try again.[/red]")


def play_questions(session: QuizSession) -> None:
    while session.phase is SessionPhase.AWAITING_ANSWER:
        view = session.current_view()
        show_question(view)
        result = None
        while result is None:
            result = session.submit(ask_answer(view))
        time.sleep(FEEDBACK_DELAY)
        show_explanation(result)
        label = "Show results" if result.is_last else "Next question"
        if result.remaining:
            label += f" ({result.remaining} left)"
        session_prompt(f"[dim]Press Enter: {label}[/dim]", default="", show_default=False)
        session.next()
        console.print()


def run_session(session: QuizSession) -> None:
    """Drive a started session until the user goes back to the menu."""
    try:
        while True:
            play_questions(session)
            summary = session.summary()
            if summary is None:
                return
            show_results(summary)
            choices = ["retry-all", "main"]
            if summary.can_retry_wrong:
                console.print(f"[dim]retry-wrong: practice the {summary.wrong_count} missed questions[/dim]")
                choices.insert(0, "retry-wrong")
            choice = Prompt.ask("Next", choices=choices, default="main")
            if choice == "retry-wrong":
                session.retry_wrong()
            elif choice == "retry-all":
                if not session.retry_all():
                    console.print(f"[yellow]{session.notice}[/yellow]")
                    return
            else:
                return
    except SessionExitRequested:
        console.print("[dim]Session abandoned. Answers so far are saved.[/dim]")
    finally:
        session.return_to_main()


def cmd_practice(db_path: str, bank: QuestionBank, mode: Mode) -> None:
    console.print(f"\n[bold]{mode.label} mode[/bold]")
    weeks = choose_weeks(bank)
    session = QuizSession(db_path, bank)
    session.configure(mode, weeks)
    if not session.start():
        console.print(f"[yellow]{session.notice}[/yellow]")
        return
    run_session(session)


def cmd_stats(db_path: str, bank: QuestionBank) -> None:
    stats = get_study_stats(db_path)
    color = get_score_color(stats["accuracy"])
    console.print(Panel(
        f"Solved: [bold]{stats['total_solved']}[/bold]  |  "
        f"Accuracy: [{color}]{stats['accuracy']}%[/{color}]",
        title="Progress", border_style="blue",
    ))
    table = Table(title="By Week")
    table.add_column("Week", style="cyan")
    table.add_column("Questions", justify="right")
    table.add_column("Attempted", justify="right")
    table.add_column("Mastered", justify="right")
    table.add_column("Missed", justify="right")
    table.add_column("Accuracy", justify="right")
    for ws in get_week_scores(db_path, bank):
        ws_color = get_score_color(ws["accuracy"])
        table.add_row(
            ws["name"],
            str(ws["questions"]),
            str(ws["attempted"]),
            str(ws["mastered"]),
            str(ws["ever_wrong"]),
            f"[{ws_color}]{ws['accuracy']}%[/{ws_color}]" if ws["attempted"] else "-",
        )
    console.print(table)


def cmd_reset(db_path: str) -> None:
    if Confirm.ask("Clear every recorded answer?", default=False):
        reset_stats(db_path)
        console.print("[green]Statistics cleared.[/green]")


def main():
    setup_logging()
    db_path = DEFAULT_DB_PATH
    init_db(db_path)
    try:
        bank = load_bank()
    except (OSError, QuestionBankError) as e:
        console.print(f"[red]Could not load questions: {e}[/red]")
        raise SystemExit(1)

    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="weekly").strip().lower()
        try:
            if choice in ("weekly", "review", "infinite"):
                cmd_practice(db_path, bank, Mode(choice))
            elif choice == "stats":
                cmd_stats(db_path, bank)
            elif choice == "reset":
                cmd_reset(db_path)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]Good luck on your exam![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            logger.debug("Command %s failed", choice, exc_info=True)
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
