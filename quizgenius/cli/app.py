"""Typer CLI application for taking an AI-generated quiz."""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from quizgenius.agents import QuestionGeneratorAgent, QuizGraderAgent
from quizgenius.cli.screens import (
    MatchingAnswer,
    SequenceAnswer,
    parse_answer,
    parse_command,
    render_question,
    render_result,
)
from quizgenius.config.settings import get_settings
from quizgenius.errors import DocumentError, QuizExpiredError
from quizgenius.export.docx_generator import export_result_to_docx
from quizgenius.lifecycle import (
    GENERATING_MESSAGE,
    GRADING_MESSAGE,
    Phase,
    QuizLifecycle,
)
from quizgenius.models.quiz import QuestionType, QuizConfiguration, QuizDifficulty, QuizResult
from quizgenius.orchestrators import GenerationOrchestrator, GradingOrchestrator
from quizgenius.upload import build_configuration

app = typer.Typer(
    name="quizgenius",
    help="Turn lesson documents into an AI-generated, AI-graded quiz",
    add_completion=False,
)

console = Console()
logger = logging.getLogger("quizgenius")


def configure_logging(verbose: bool) -> None:
    """Route log records through Rich; DEBUG with --verbose, else WARNING."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=verbose)],
        force=True,
    )


@app.command()
def run(
    files: List[Path] = typer.Argument(
        ...,
        help="Lesson documents to build the quiz from",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
    questions: Optional[int] = typer.Option(
        None,
        "--questions",
        "-q",
        help="Number of questions to generate",
        min=1,
        max=50,
    ),
    types: Optional[List[QuestionType]] = typer.Option(
        None,
        "--type",
        "-t",
        help="Allowed question type (can specify multiple times)",
        case_sensitive=False,
    ),
    auto_detect: bool = typer.Option(
        False,
        "--auto-detect",
        help="Let the AI choose the question types",
    ),
    difficulty: QuizDifficulty = typer.Option(
        QuizDifficulty.MEDIUM,
        "--difficulty",
        "-d",
        help="Quiz difficulty",
        case_sensitive=False,
    ),
    instructions: Optional[str] = typer.Option(
        None,
        "--instructions",
        "-i",
        help="Extra instructions for the question writer",
    ),
    time_limit: Optional[int] = typer.Option(
        None,
        "--time-limit",
        help="Time limit in seconds (0 = unlimited)",
        min=0,
    ),
    report: Optional[Path] = typer.Option(
        None,
        "--report",
        "-r",
        help="Write a DOCX report of the graded quiz to this path",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """
    Generate a quiz from lesson documents, take it, and get it graded.

    Example:
        quizgenius run lesson.pdf notes.md -q 8 -t multiple_choice -t matching --time-limit 600
    """
    configure_logging(verbose)

    try:
        settings = get_settings()
    except ValidationError as e:
        console.print(
            "[red]Error:[/red] ANTHROPIC_API_KEY environment variable not set.",
            style="bold",
        )
        console.print(
            "\nPlease set your API key:\n  export ANTHROPIC_API_KEY='your-key-here'"
        )
        logger.debug("Settings validation failed: %s", e)
        raise typer.Exit(code=1)

    selected_types = list(types or [])
    if not selected_types and not auto_detect:
        selected_types = [QuestionType.MULTIPLE_CHOICE]

    try:
        config = build_configuration(
            files,
            num_questions=questions or settings.default_question_count,
            selected_types=selected_types,
            auto_detect=auto_detect,
            difficulty=difficulty,
            custom_instructions=instructions,
            time_limit=settings.default_time_limit if time_limit is None else time_limit,
            max_bytes=int(settings.max_document_mb * 1024 * 1024),
        )
    except DocumentError as e:
        console.print(f"[red]Error:[/red] {e}", style="bold")
        raise typer.Exit(code=1)

    display_config(config)

    result = asyncio.run(take_quiz(config))
    if result is None:
        raise typer.Exit(code=1)

    if report:
        output_file = export_result_to_docx(result, str(report))
        console.print(f"\n[green]✓[/green] Report saved to: {output_file}")


async def take_quiz(config: QuizConfiguration) -> Optional[QuizResult]:
    """
    Drive one quiz attempt through the lifecycle.

    Args:
        config: Configuration from the command line

    Returns:
        The graded result, or None when generation failed
    """
    lifecycle = QuizLifecycle(
        GenerationOrchestrator(QuestionGeneratorAgent()),
        GradingOrchestrator(QuizGraderAgent()),
    )

    with console.status(f"[cyan]{GENERATING_MESSAGE}"):
        await lifecycle.submit_configuration(config)

    if lifecycle.phase == Phase.UPLOAD:
        console.print(f"\n[red]{lifecycle.view().notice}[/red]")
        return None

    while lifecycle.phase == Phase.QUIZ:
        notice = lifecycle.view().notice
        if notice:
            console.print(f"\n[red]{notice}[/red]")

        pending_input = await administer(lifecycle)

        with console.status(f"[cyan]{GRADING_MESSAGE}"):
            if pending_input is None:
                await lifecycle.submit_quiz()
            else:
                await lifecycle.wait_for_submission()

        if pending_input is not None and not pending_input.done():
            console.print("[dim]Press Enter to continue.[/dim]")
            await pending_input

    render_result(console, lifecycle.result)
    return lifecycle.result


async def administer(lifecycle: QuizLifecycle) -> Optional[asyncio.Future]:
    """
    Run the quiz screen until the user submits or the time runs out.

    Returns:
        None after a manual submit; after a timeout, the input read that was
        still waiting on the terminal
    """
    left_quiz = asyncio.Event()

    def on_transition(state) -> None:
        if state.phase != Phase.QUIZ:
            left_quiz.set()

    unsubscribe = lifecycle.subscribe(on_transition)
    index = 0

    try:
        while True:
            view = lifecycle.view()
            render_question(console, view, index)

            read = asyncio.ensure_future(asyncio.to_thread(console.input, "[bold]> [/bold]"))
            timeout = asyncio.ensure_future(left_quiz.wait())
            done, _ = await asyncio.wait({read, timeout}, return_when=asyncio.FIRST_COMPLETED)

            if read not in done:
                console.print("\n[bold yellow]Time is up! Submitting your answers...[/]")
                return read
            timeout.cancel()

            try:
                raw = read.result()
            except EOFError:
                console.print("\n[bold yellow]Input closed, submitting your answers.[/]")
                return None
            command = parse_command(raw)
            if command is not None:
                if command.type == "submit":
                    return None
                if command.type == "next":
                    index = min(index + 1, len(view.questions) - 1)
                elif command.type == "prev":
                    index = max(index - 1, 0)
                elif command.type == "goto" and 1 <= command.target <= len(view.questions):
                    index = command.target - 1
                else:
                    console.print("[dim]Commands: :n next, :p previous, :g N go to, :submit[/dim]")
                continue

            question = view.questions[index]
            try:
                answer = parse_answer(question, raw)
            except ValueError as e:
                console.print(f"[red]{e}[/red]")
                continue

            try:
                if isinstance(answer, MatchingAnswer):
                    lifecycle.record_matching(question.id, answer.mapping)
                elif isinstance(answer, SequenceAnswer):
                    lifecycle.record_sequence(question.id, answer.items)
                else:
                    lifecycle.record_answer(question.id, answer.text)
            except QuizExpiredError as e:
                console.print(f"[yellow]{e}. Type :submit to retry grading.[/yellow]")
                continue

            if index + 1 < len(view.questions):
                index += 1
            else:
                console.print("[dim]Last question answered. Type :submit when ready.[/dim]")
    finally:
        unsubscribe()


@app.command()
def info() -> None:
    """Display information about the quiz generator."""
    info_text = """
[bold cyan]QuizGenius[/bold cyan]
Version: 0.1.0

[bold]Lifecycle:[/bold]
  • Upload - Lesson documents and quiz options
  • Generating - AI writes the questions
  • Quiz - Answer at your own pace or against the clock
  • Grading - AI grades every answer with feedback
  • Results - Score, corrections and overall feedback

[bold]Question types:[/bold]
  multiple_choice, true_false, fill_in_blank, short_answer, matching, sequencing

[bold]Model:[/bold] Claude via the Anthropic API (set MODEL_NAME to change)
    """
    console.print(Panel(info_text, title="QuizGenius Info", border_style="cyan"))


def display_config(config: QuizConfiguration) -> None:
    """Display the configuration before generation."""
    table = Table(title="Quiz Configuration", show_header=False, border_style="cyan")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Documents", ", ".join(doc.name for doc in config.documents))
    table.add_row("Questions", str(config.num_questions))
    if config.auto_detect:
        table.add_row("Question types", "Auto-detect")
    else:
        table.add_row("Question types", ", ".join(t.value for t in config.selected_types))
    table.add_row("Difficulty", config.difficulty.value)
    table.add_row(
        "Time limit", f"{config.time_limit}s" if config.time_limit else "Unlimited"
    )
    if config.custom_instructions:
        table.add_row("Instructions", config.custom_instructions)

    console.print()
    console.print(table)


@app.callback()
def callback() -> None:
    """
    QuizGenius - Generate, take and grade quizzes from your lesson documents.
    """
    pass


if __name__ == "__main__":
    app()
