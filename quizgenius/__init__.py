"""QuizGenius - AI-generated quizzes from lesson documents."""

__version__ = "0.1.0"
