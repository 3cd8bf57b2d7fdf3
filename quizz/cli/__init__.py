"""Command line interface for the quizz practice service."""
