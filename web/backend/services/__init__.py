"""Service layer between routers and the match engine."""

from .match_service import MatchService, to_match_summary
from .assignment_service import to_assignment_detail, to_claim_detail
