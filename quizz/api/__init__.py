"""HTTP API for the quizz practice service."""
