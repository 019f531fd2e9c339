from .base import Base
from .job import Job
from .analysis import RepoAnalysis
from .match import JobMatch, application_status
from .assignment import Assignment, CandidateAssignment, empty_todo, is_valid_todo

__all__ = [
    'Base',
    'Job',
    'RepoAnalysis',
    'JobMatch',
    'application_status',
    'Assignment',
    'CandidateAssignment',
    'empty_todo',
    'is_valid_todo',
]
