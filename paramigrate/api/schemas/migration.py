"""Migration request/response schemas."""

from typing import List, Optional

from pydantic import BaseModel, Field


class AnalyzeRequest(BaseModel):
    """Analyze a project root."""
    project_root: str = Field(..., description="Path to the project directory", min_length=1)


class PlanRequest(BaseModel):
    """Scan a project and build a replacement plan."""
    project_root: str = Field(..., description="Path to the project directory", min_length=1)
    strategy: Optional[str] = Field(None, description="Strategy name; detected when omitted")
    strategy_priority: Optional[List[str]] = Field(
        None, description="Detection order override for this request"
    )


class ExecuteRequest(PlanRequest):
    """Scan, plan and execute a migration in one call."""


class ValidateRequest(BaseModel):
    project_root: str = Field(..., description="Path to the project directory", min_length=1)


class ScoreRequest(BaseModel):
    """Score a posted project state (the shape of ``ProjectState.to_dict``)."""
    state: dict = Field(..., description="Project state")


class ScoreResponse(BaseModel):
    score: int = Field(..., ge=0, le=100, description="Migration success score")
