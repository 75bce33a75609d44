"""Score messages and progress statistics."""
from finance_quiz.bank import QuestionBank
from finance_quiz.models import QuestionStat, percent
from finance_quiz.stats import get_question_stats, get_overall_stats

MASTERED_MESSAGE = "You've mastered every question!"


def get_result_message(percentage: float) -> str:
    if percentage >= 90:
        return "Perfect! You're ready for the exam!"
    elif percentage >= 70:
        return "Nice work! A little more review and you've got it."
    elif percentage >= 50:
        return "Time to review. Try the questions you missed again!"
    return "Don't give up! Repetition is what makes it stick."


def get_score_color(percentage: float) -> str:
    if percentage >= 90:
        return "green"
    elif percentage >= 70:
        return "yellow"
    elif percentage >= 50:
        return "dark_orange"
    return "red"


def get_week_scores(db_path: str, bank: QuestionBank) -> list[dict]:
    """Per-week breakdown of the recorded statistics."""
    stats = get_question_stats(db_path)
    results = []
    for tag in bank.weeks():
        questions = bank.questions_for_weeks([tag])
        correct = wrong = attempted = mastered = ever_wrong = 0
        for q in questions:
            stat = stats.get(q.id, QuestionStat())
            correct += stat.correct
            wrong += stat.wrong
            if stat.correct or stat.wrong:
                attempted += 1
            if stat.correct:
                mastered += 1
            if stat.was_wrong:
                ever_wrong += 1
        accuracy = percent(correct, correct + wrong)
        results.append({
            "week": tag,
            "name": bank.week_name(tag),
            "questions": len(questions),
            "attempted": attempted,
            "mastered": mastered,
            "ever_wrong": ever_wrong,
            "accuracy": accuracy,
        })
    return results


def get_study_stats(db_path: str) -> dict:
    overall = get_overall_stats(db_path)
    return {
        "total_solved": overall.total_solved,
        "total_correct": overall.total_correct,
        "accuracy": overall.accuracy,
    }
