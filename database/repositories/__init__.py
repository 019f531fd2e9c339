from database.repositories.base import BaseRepository
from database.repositories.job import JobRepository
from database.repositories.analysis import AnalysisRepository
from database.repositories.match import MatchRepository
from database.repositories.assignment import AssignmentRepository

__all__ = [
    'BaseRepository',
    'JobRepository',
    'AnalysisRepository',
    'MatchRepository',
    'AssignmentRepository',
]
