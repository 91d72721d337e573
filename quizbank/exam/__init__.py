"""Exam sessions."""

from quizbank.exam.engine import ExamSessionEngine, ExamStatus, Score, shuffle_in_place

__all__ = ["ExamSessionEngine", "ExamStatus", "Score", "shuffle_in_place"]
