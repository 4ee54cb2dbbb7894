"""DOCX report generator for graded quiz results."""

from datetime import datetime
from pathlib import Path

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Inches, Pt, RGBColor

from quizgenius.models.quiz import GradedQuestion, QuestionType, QuizResult

CORRECT_COLOR = RGBColor(0, 128, 0)
PARTIAL_COLOR = RGBColor(255, 140, 0)
INCORRECT_COLOR = RGBColor(200, 0, 0)
MUTED_COLOR = RGBColor(96, 96, 96)


def ensure_output_directory(output_dir: str = "output") -> Path:
    """
    Ensure the output directory exists.

    Args:
        output_dir: Directory path to create

    Returns:
        Path object for the output directory
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)
    return output_path


def generate_timestamped_filename(base_name: str, extension: str = "docx") -> str:
    """
    Generate a filename with timestamp.

    Args:
        base_name: Base name for the file
        extension: File extension (without dot)

    Returns:
        Filename with timestamp
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    # Clean the base name to remove any path components
    base_name = Path(base_name).stem
    return f"{base_name}_{timestamp}.{extension}"


def export_result_to_docx(
    result: QuizResult,
    output_path: str,
    title: str = "Quiz Results",
    use_output_dir: bool = False,
    output_dir: str = "output",
) -> str:
    """
    Export a graded quiz to a formatted DOCX report.

    Args:
        result: Graded quiz result
        output_path: Path where the DOCX file should be saved
        title: Report heading
        use_output_dir: If True, saves to output_dir with a timestamped name
        output_dir: Directory to save files in when use_output_dir is set

    Returns:
        Path to the created DOCX file
    """
    if use_output_dir:
        output_path = str(
            ensure_output_directory(output_dir) / generate_timestamped_filename(output_path)
        )
    else:
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)

    doc = Document()
    setup_document_styles(doc)

    heading = doc.add_heading(title, level=0)
    heading.alignment = WD_ALIGN_PARAGRAPH.CENTER

    add_score_summary(doc, result)

    if result.overall_feedback:
        doc.add_heading("Overall Feedback", level=1)
        feedback_para = doc.add_paragraph(result.overall_feedback)
        feedback_para.runs[0].italic = True

    doc.add_page_break()
    doc.add_heading("Question Feedback", level=1)

    for number, question in enumerate(result.graded_questions, 1):
        add_graded_question(doc, number, question)

    doc.save(output_path)

    return output_path


def setup_document_styles(doc: Document) -> None:
    """
    Set up document-wide styles.

    Args:
        doc: Document to configure
    """
    style = doc.styles["Normal"]
    font = style.font
    font.name = "Calibri"
    font.size = Pt(11)

    for section in doc.sections:
        section.top_margin = Inches(1)
        section.bottom_margin = Inches(1)
        section.left_margin = Inches(1)
        section.right_margin = Inches(1)


def add_score_summary(doc: Document, result: QuizResult) -> None:
    """Add the score line, correct count and generation date."""
    score_para = doc.add_paragraph()
    score_para.alignment = WD_ALIGN_PARAGRAPH.CENTER
    score_run = score_para.add_run(
        f"Score: {result.total_score:g} / {result.max_score:g} ({result.percentage:g}%)"
    )
    score_run.bold = True
    score_run.font.size = Pt(16)

    count_para = doc.add_paragraph(
        f"Correct answers: {result.correct_count} of {len(result.graded_questions)}"
    )
    count_para.alignment = WD_ALIGN_PARAGRAPH.CENTER

    date_para = doc.add_paragraph(f"Graded: {datetime.now().strftime('%Y-%m-%d %H:%M')}")
    date_para.alignment = WD_ALIGN_PARAGRAPH.CENTER
    date_para.runs[0].font.size = Pt(9)
    date_para.runs[0].font.color.rgb = MUTED_COLOR


def score_color(question: GradedQuestion) -> RGBColor:
    """Green for correct, orange for partial credit, red otherwise."""
    if question.is_correct:
        return CORRECT_COLOR
    if question.score > 0:
        return PARTIAL_COLOR
    return INCORRECT_COLOR


def add_graded_question(doc: Document, number: int, question: GradedQuestion) -> None:
    """
    Add one graded question with the answer given and the feedback.

    Args:
        doc: Document to add to
        number: Position in the quiz, starting at 1
        question: Graded question
    """
    q_para = doc.add_paragraph()
    q_run = q_para.add_run(f"Q{number}. ")
    q_run.bold = True
    q_run.font.size = Pt(12)
    q_para.add_run(question.question_text)

    verdict = "Correct" if question.is_correct else "Incorrect"
    verdict_para = doc.add_paragraph()
    verdict_run = verdict_para.add_run(f"{verdict}  |  Score: {question.score:g}")
    verdict_run.bold = True
    verdict_run.font.color.rgb = score_color(question)

    if question.question_type == QuestionType.MULTIPLE_CHOICE and question.options:
        for option in question.options:
            opt_para = doc.add_paragraph(f"- {option}")
            opt_para.paragraph_format.left_indent = Inches(0.5)

    answer_para = doc.add_paragraph()
    answer_para.paragraph_format.left_indent = Inches(0.25)
    answer_para.add_run("Your answer: ").bold = True
    answer_para.add_run(question.user_answer or "(no answer)")

    if not question.is_correct and question.ai_correction:
        correction_para = doc.add_paragraph()
        correction_para.paragraph_format.left_indent = Inches(0.25)
        correction_para.add_run("Correction: ").bold = True
        correction_para.add_run(question.ai_correction)

    if question.explanation:
        exp_para = doc.add_paragraph()
        exp_para.paragraph_format.left_indent = Inches(0.25)
        exp_run = exp_para.add_run(f"Explanation: {question.explanation}")
        exp_run.italic = True
        exp_run.font.size = Pt(10)
        exp_run.font.color.rgb = MUTED_COLOR

    # Add spacing between questions
    doc.add_paragraph()
