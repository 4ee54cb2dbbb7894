"""Rich rendering and input handling for the quiz and result screens."""

import string
from dataclasses import dataclass
from typing import Literal, Optional, Union

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from quizgenius.lifecycle import LifecycleView
from quizgenius.models.quiz import PublicQuestion, QuestionType, QuizResult

LETTERS = string.ascii_uppercase


@dataclass(frozen=True)
class ScreenCommand:
    """Navigation command typed on the quiz screen."""

    type: Literal["next", "prev", "goto", "submit", "help"]
    target: Optional[int] = None


@dataclass(frozen=True)
class TextAnswer:
    text: str


@dataclass(frozen=True)
class MatchingAnswer:
    mapping: dict[str, str]


@dataclass(frozen=True)
class SequenceAnswer:
    items: list[str]


ParsedAnswer = Union[TextAnswer, MatchingAnswer, SequenceAnswer]


def parse_command(raw: str) -> Optional[ScreenCommand]:
    """
    Parse a ':'-prefixed navigation command.

    Args:
        raw: Line typed by the user

    Returns:
        ScreenCommand, or None when the line is not a command
    """
    text = raw.strip()
    if not text.startswith(":"):
        return None

    parts = text[1:].split()
    if not parts:
        return ScreenCommand("help")

    name = parts[0].lower()
    if name in {"n", "next"}:
        return ScreenCommand("next")
    if name in {"p", "prev", "previous"}:
        return ScreenCommand("prev")
    if name in {"s", "submit"}:
        return ScreenCommand("submit")
    if name in {"g", "goto"} and len(parts) > 1 and parts[1].isdigit():
        return ScreenCommand("goto", int(parts[1]))
    return ScreenCommand("help")


def _letter_index(token: str, size: int) -> int:
    token = token.strip().upper()
    if len(token) != 1 or token not in LETTERS[:size]:
        raise ValueError(f"'{token}' is not one of {', '.join(LETTERS[:size])}")
    return LETTERS.index(token)


def parse_answer(question: PublicQuestion, raw: str) -> ParsedAnswer:
    """
    Interpret a typed answer for the given question.

    - multiple_choice: an option letter, or the option text itself
    - true_false: t/true or f/false
    - matching: "1=B, 2=A" pairing left numbers with right letters
    - sequencing: item numbers in the chosen order, e.g. "3 1 2"
    - anything else: the text as typed

    Raises:
        ValueError: if the input does not fit the question
    """
    text = raw.strip()
    kind = question.question_type

    if kind == QuestionType.MULTIPLE_CHOICE and question.options:
        if len(text) == 1 and text.upper() in LETTERS[: len(question.options)]:
            return TextAnswer(question.options[_letter_index(text, len(question.options))])
        for option in question.options:
            if option.lower() == text.lower():
                return TextAnswer(option)
        raise ValueError("Choose one of the option letters")

    if kind == QuestionType.TRUE_FALSE:
        lowered = text.lower()
        if lowered in {"t", "true"}:
            return TextAnswer("True")
        if lowered in {"f", "false"}:
            return TextAnswer("False")
        raise ValueError("Answer with true or false")

    if kind == QuestionType.MATCHING and question.matching_left:
        left = question.matching_left
        right = question.matching_right or []
        mapping: dict[str, str] = {}
        for chunk in text.replace(";", ",").split(","):
            if not chunk.strip():
                continue
            number, _, letter = chunk.partition("=")
            if not number.strip().isdigit() or not 1 <= int(number) <= len(left):
                raise ValueError(f"'{chunk.strip()}' must look like 1=A")
            mapping[left[int(number) - 1]] = right[_letter_index(letter, len(right))]
        if not mapping:
            raise ValueError("Pair items like: 1=B, 2=A")
        return MatchingAnswer(mapping)

    if kind == QuestionType.SEQUENCING and question.sequencing_items:
        items = question.sequencing_items
        numbers = text.replace(",", " ").split()
        if sorted(numbers) != sorted(str(i) for i in range(1, len(items) + 1)):
            raise ValueError(f"List each number from 1 to {len(items)} once")
        return SequenceAnswer([items[int(n) - 1] for n in numbers])

    if not text:
        raise ValueError("Type an answer")
    return TextAnswer(text)


def format_remaining(seconds: Optional[float]) -> str:
    """Render remaining time as M:SS, or a dash when untimed."""
    if seconds is None:
        return "-"
    whole = int(seconds)
    return f"{whole // 60}:{whole % 60:02d}"


def render_question(console: Console, view: LifecycleView, index: int) -> None:
    """Show one question with its choices, recorded answer and status line."""
    question = view.questions[index]
    header = Text.assemble(
        (f"Question {index + 1}", "bold cyan"),
        (f" / {len(view.questions)}", "dim"),
        (f"  [{question.question_type.value.replace('_', ' ')}]", "dim"),
    )
    console.print()
    console.rule(header)
    console.print(Text(question.question_text, style="bold"))

    table = Table(show_header=False, box=box.SIMPLE, expand=True)
    if question.options:
        table.add_column("Key", justify="center", style="cyan")
        table.add_column("Choice")
        for i, option in enumerate(question.options):
            table.add_row(LETTERS[i], option)
        console.print(table)
    elif question.matching_left:
        table.add_column("#", justify="right", style="cyan")
        table.add_column("Item")
        table.add_column("Key", justify="center", style="cyan")
        table.add_column("Match")
        right = question.matching_right or []
        for i, left in enumerate(question.matching_left):
            table.add_row(str(i + 1), left, LETTERS[i] if i < len(right) else "", right[i] if i < len(right) else "")
        console.print(table)
    elif question.sequencing_items:
        table.add_column("#", justify="right", style="cyan")
        table.add_column("Item")
        for i, item in enumerate(question.sequencing_items):
            table.add_row(str(i + 1), item)
        console.print(table)

    recorded = view.answers.get(question.id)
    if recorded:
        console.print(Text(f"Your answer: {recorded}", style="green"))

    answered = sum(1 for q in view.questions if view.answers.get(q.id, "").strip())
    status = f"Answered {answered}/{len(view.questions)}"
    if view.expired:
        status += " | Time is up, answers are locked"
    elif view.time_limit:
        status += f" | Time left {format_remaining(view.remaining_seconds)}"
    console.print(Text(f"{status} | {answer_hint(question)} | :n :p :g N :submit", style="dim"))


def answer_hint(question: PublicQuestion) -> str:
    if question.question_type == QuestionType.MULTIPLE_CHOICE:
        return "type a letter"
    if question.question_type == QuestionType.TRUE_FALSE:
        return "type true or false"
    if question.question_type == QuestionType.MATCHING:
        return "pair like 1=B, 2=A"
    if question.question_type == QuestionType.SEQUENCING:
        return "order like 3 1 2"
    return "type your answer"


def render_result(console: Console, result: QuizResult) -> None:
    """Show the score overview, per-question feedback and overall feedback."""
    console.print()
    console.rule(Text("Quiz Results", style="bold magenta"))

    overview = Table(show_header=False, box=box.MINIMAL_DOUBLE_HEAD, expand=False)
    overview.add_column("Metric", style="bold")
    overview.add_column("Value", justify="right")
    overview.add_row("Score", f"{result.total_score:g} / {result.max_score:g}")
    overview.add_row("Percentage", f"{result.percentage:g}%")
    overview.add_row("Correct", f"{result.correct_count} / {len(result.graded_questions)}")
    console.print(overview)

    for number, graded in enumerate(result.graded_questions, 1):
        if graded.is_correct:
            border = "green"
        elif graded.score > 0:
            border = "yellow"
        else:
            border = "red"
        body = Text()
        body.append(f"{graded.question_text}\n\n", style="bold")
        body.append("Your answer: ", style="bold")
        body.append(f"{graded.user_answer or '(no answer)'}\n")
        if not graded.is_correct and graded.ai_correction:
            body.append("Correction: ", style="bold")
            body.append(f"{graded.ai_correction}\n")
        if graded.explanation:
            body.append(graded.explanation, style="italic")
        console.print(
            Panel(body, title=f"Q{number} | score {graded.score:g}", border_style=border)
        )

    if result.overall_feedback:
        console.print(Panel(result.overall_feedback, title="Overall Feedback", border_style="cyan"))
