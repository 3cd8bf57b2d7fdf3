# SQLAlchemy models
from .base import Base
from .progress import ProgressRecord
from .question import QuestionRecord

__all__ = [
    "Base",
    "QuestionRecord",
    "ProgressRecord",
]
