from database.repositories.base import BaseRepository
from database.repositories.answer import AnswerRepository
from database.repositories.user import UserRepository
from database.repositories.quality_metrics import QualityMetricsRepository
from database.repositories.sources import (
    SqlAnswerSource,
    SqlEngagementSource,
    SqlExpertiseSource,
    SqlTrustSource,
)

__all__ = [
    'BaseRepository',
    'AnswerRepository',
    'UserRepository',
    'QualityMetricsRepository',
    'SqlAnswerSource',
    'SqlEngagementSource',
    'SqlExpertiseSource',
    'SqlTrustSource',
]
