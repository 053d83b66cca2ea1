"""Pydantic schemas for API request/response models."""

from .migration import (
    AnalyzeRequest,
    ExecuteRequest,
    PlanRequest,
    ScoreRequest,
    ScoreResponse,
    ValidateRequest,
)

__all__ = [
    "AnalyzeRequest",
    "ExecuteRequest",
    "PlanRequest",
    "ScoreRequest",
    "ScoreResponse",
    "ValidateRequest",
]
