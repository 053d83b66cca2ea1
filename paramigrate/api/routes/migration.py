"""Migration API routes -- scan, plan, execute and validate endpoints.

  POST /analyze       -- analysis report for a project root
  POST /compatibility -- Wagmi hook compatibility report
  POST /plan          -- scan + replacement plan (strategy detected if omitted)
  POST /execute       -- scan + plan + atomic execution with rollback
  POST /validate      -- pre-flight, post-migration and completion batteries + score
  POST /score         -- migration score for a posted project state
  GET  /strategies    -- registered strategies and detection priority

Every request gets its own engine; nothing is kept between requests.
Caller misuse maps to 409, unscannable projects to 422.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from ...core.errors import PreconditionError, ScanError
from ...core.migration import (
    MigrationEngine,
    ProjectState,
    StrategyRegistry,
    analyze_project,
    check_project_compatibility,
)
from ..deps import get_migration_engine, get_scanner, get_settings, get_validator
from ..schemas.migration import (
    AnalyzeRequest,
    ExecuteRequest,
    PlanRequest,
    ScoreRequest,
    ScoreResponse,
    ValidateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/migration", tags=["migration"])


def _plan(engine: MigrationEngine, data: PlanRequest):
    engine.scan_project_state(data.project_root)
    strategy = data.strategy or engine.detect_strategy(data.strategy_priority)
    if strategy is None:
        raise PreconditionError(
            f"No migration strategy detected for {data.project_root}"
        )
    return engine.create_replacement_plan(strategy)


# ── Endpoints ───────────────────────────────────────────────────────────

@router.post("/analyze")
async def analyze(
    data: AnalyzeRequest,
    scanner=Depends(get_scanner),
    settings=Depends(get_settings),
):
    """Analyze a project's wallet-provider integration."""
    try:
        return analyze_project(data.project_root, scanner=scanner, settings=settings)
    except ScanError as e:
        logger.error(f"Analysis failed: {e}")
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/compatibility")
async def compatibility(
    data: AnalyzeRequest,
    scanner=Depends(get_scanner),
    settings=Depends(get_settings),
):
    """Report which Wagmi hooks keep working with Para."""
    try:
        return check_project_compatibility(data.project_root, scanner=scanner, settings=settings)
    except ScanError as e:
        logger.error(f"Compatibility check failed: {e}")
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/plan")
async def create_plan(
    data: PlanRequest,
    engine: MigrationEngine = Depends(get_migration_engine),
):
    """Scan the project and return its replacement plan without executing it."""
    try:
        plan = _plan(engine, data)
    except ScanError as e:
        logger.error(f"Plan failed: {e}")
        raise HTTPException(status_code=422, detail=str(e))
    except PreconditionError as e:
        logger.error(f"Plan failed: {e}")
        raise HTTPException(status_code=409, detail=str(e))
    return plan.to_dict()


@router.post("/execute")
async def execute(
    data: ExecuteRequest,
    engine: MigrationEngine = Depends(get_migration_engine),
):
    """Plan and execute a migration; rolled-back attempts still return 200."""
    try:
        plan = _plan(engine, data)
        result = engine.execute_atomic_migration()
    except ScanError as e:
        logger.error(f"Migration failed: {e}")
        raise HTTPException(status_code=422, detail=str(e))
    except PreconditionError as e:
        logger.error(f"Migration failed: {e}")
        raise HTTPException(status_code=409, detail=str(e))

    response = {
        "plan": plan.to_dict(),
        "status": engine.status.value,
        "result": result.to_dict(),
    }
    if result.final_state is not None:
        response["score"] = engine.calculate_migration_success(result.final_state)
        response["final_state"] = result.final_state.to_dict()
    return response


@router.post("/validate")
async def validate(
    data: ValidateRequest,
    engine: MigrationEngine = Depends(get_migration_engine),
):
    """Run all three validation batteries against the project as it is now."""
    try:
        engine.scan_project_state(data.project_root)
    except ScanError as e:
        logger.error(f"Validation failed: {e}")
        raise HTTPException(status_code=422, detail=str(e))

    return {
        "pre_flight": engine.validate_pre_flight().to_dict(),
        "post_migration": engine.validate_post_migration().to_dict(),
        "completion": engine.validate_completion().to_dict(),
        "score": engine.calculate_migration_success(),
    }


@router.post("/score", response_model=ScoreResponse)
async def score(
    data: ScoreRequest,
    validator=Depends(get_validator),
):
    """Migration success score (0-100) for a posted project state."""
    try:
        state = ProjectState.from_dict(data.state)
    except (TypeError, ValueError) as e:
        logger.error(f"Invalid project state: {e}")
        raise HTTPException(status_code=422, detail=f"Invalid project state: {e}")
    return ScoreResponse(score=validator.calculate_migration_success(state))


@router.get("/strategies")
async def list_strategies(settings=Depends(get_settings)):
    """List registered strategies and the configured detection priority."""
    return {
        "strategies": StrategyRegistry.list_strategies(),
        "priority": list(settings.strategy_priority),
    }
