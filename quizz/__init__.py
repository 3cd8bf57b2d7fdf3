"""Quizz practice engine: answer verification, practice selection and answer statistics."""

__version__ = "1.0.0"
