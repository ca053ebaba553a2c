"""
API routes and endpoints.
"""

from fastapi import APIRouter
from .v1 import schedule

api_router = APIRouter()

api_router.include_router(schedule.router, prefix="/schedule", tags=["排期"])
