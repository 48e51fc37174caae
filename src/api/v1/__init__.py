"""
API v1 routes.
"""

from fastapi import APIRouter

from src.api.v1 import practice, progression, skip_ahead

router = APIRouter()

router.include_router(
    progression.router,
    prefix="/learners/{learner_id}/skills/{skill_id}",
    tags=["Progression"],
)
router.include_router(practice.router, prefix="/practice-sessions", tags=["Practice Sessions"])
router.include_router(skip_ahead.router, prefix="/skip-ahead", tags=["Skip Ahead"])
