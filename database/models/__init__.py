from .base import Base, JSONType
from .user import User, UserExpertiseStats
from .qa import Question, Answer, AnswerReaction, AnswerFlag
from .quality import AnswerQualityMetrics

__all__ = [
    'Base',
    'JSONType',
    'User',
    'UserExpertiseStats',
    'Question',
    'Answer',
    'AnswerReaction',
    'AnswerFlag',
    'AnswerQualityMetrics',
]
