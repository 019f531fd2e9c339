"""API route handlers."""

from .matches import router as matches_router
from .analyses import router as analyses_router
from .candidates import router as candidates_router
from .jobs import router as jobs_router
