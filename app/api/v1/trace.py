"""Routine trace endpoints.

Admin-only. A trace really invokes the routine, so whatever it writes is
committed when the trace succeeds and rolled back when it fails.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_catalog, get_db, get_invocation_engine, require_admin
from app.schemas.trace import RoutineSummary, TraceErrorResponse, TraceRequest, TraceResponse
from app.services.routines import RoutineCatalog
from app.services.tracing import InvocationEngine, TraceError

router = APIRouter(
    prefix="/trace",
    tags=["trace"],
    dependencies=[Depends(require_admin)],
)
logger = logging.getLogger(__name__)


# Status codes a TraceError can map to
TRACE_ERROR_RESPONSES = {
    status_code: {"model": TraceErrorResponse}
    for status_code in (400, 404, 422, 500)
}


@router.post("", response_model=TraceResponse, responses=TRACE_ERROR_RESPONSES)
async def trace_routine(
    request: TraceRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    tracer: Annotated[InvocationEngine, Depends(get_invocation_engine)],
) -> TraceResponse:
    """Invoke a routine from a call expression and report its statements."""
    try:
        result = await db.run_sync(tracer.trace, request.call)
    except TraceError as e:
        logger.warning(f"Trace failed for {request.call!r}: [{e.kind}] {e.message}")
        await db.rollback()
        raise HTTPException(status_code=e.status_code, detail=e.to_dict())
    except Exception as e:
        logger.error(f"Trace error for {request.call!r}: {e}", exc_info=True)
        await db.rollback()
        raise

    await db.commit()

    return TraceResponse(
        call=request.call,
        routine=result.routine,
        statement_count=result.statement_count,
        arguments=result.arguments,
        report=result.report,
    )


@router.get("/routines", response_model=list[RoutineSummary])
async def list_routines(
    catalog: Annotated[RoutineCatalog, Depends(get_catalog)],
) -> list[RoutineSummary]:
    """List routines available for tracing."""
    return [
        RoutineSummary.model_validate(descriptor)
        for descriptor in catalog.list_routines()
    ]
