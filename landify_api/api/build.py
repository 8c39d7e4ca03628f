"""Background build endpoints: POST /api/build and GET /api/result/{session_id}"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from landify_api.agents.orchestrator import ContentPipeline
from landify_api.api.deps import enforce_rate_limit, get_pipeline, get_sessions
from landify_api.core.state_machine import PipelinePhase, PipelineState
from landify_api.models.content import FinalContent, ResultEvent
from landify_api.models.schemas import BuildResponse, GenerateRequest

router = APIRouter()
logger = logging.getLogger(__name__)

SESSION_TTL = timedelta(hours=1)
CLEANUP_INTERVAL_SECONDS = 300


@dataclass
class BuildSession:
    """One background pipeline run and its outcome"""
    state: PipelineState
    result: Optional[FinalContent] = None


async def _run_build(pipeline: ContentPipeline, session: BuildSession, request: GenerateRequest) -> None:
    """Drive the pipeline; its progress lands in session.state for SSE replay"""
    logger.info(f"[Build] {session.state.run_id}: starting for {request.business_data.name}")
    async for event in pipeline.generate_with_progress(
        request.business_data,
        strategy=request.strategy,
        preferences=request.preferences,
        state=session.state,
    ):
        if isinstance(event, ResultEvent):
            session.result = event.data
    logger.info(f"[Build] {session.state.run_id}: finished in phase {session.state.phase.value}")


def remove_expired_sessions(sessions: Dict[str, BuildSession], now: Optional[datetime] = None) -> int:
    """Drop terminal sessions idle for longer than SESSION_TTL"""
    cutoff = (now or datetime.now(timezone.utc)) - SESSION_TTL
    expired = [
        session_id for session_id, session in sessions.items()
        if session.state.is_terminal() and session.state.last_updated and session.state.last_updated < cutoff
    ]
    for session_id in expired:
        del sessions[session_id]
    if expired:
        logger.info(f"[Build] Cleaned up {len(expired)} old sessions")
    return len(expired)


async def cleanup_old_sessions(sessions: Dict[str, BuildSession]) -> None:
    """Periodically clean up terminal sessions; runs until cancelled"""
    while True:
        await asyncio.sleep(CLEANUP_INTERVAL_SECONDS)
        remove_expired_sessions(sessions)


@router.post("/build", response_model=BuildResponse, status_code=202, dependencies=[Depends(enforce_rate_limit)])
async def start_build(
    request: GenerateRequest,
    background_tasks: BackgroundTasks,
    pipeline: ContentPipeline = Depends(get_pipeline),
    sessions: dict = Depends(get_sessions),
) -> BuildResponse:
    """Start a generation run in the background; follow it on /sse/progress/{session_id}"""
    session_id = str(uuid.uuid4())
    session = BuildSession(state=PipelineState(session_id))
    sessions[session_id] = session
    background_tasks.add_task(_run_build, pipeline, session, request)
    logger.info(f"POST /api/build: session {session_id} queued for {request.business_data.name}")
    return BuildResponse(session_id=session_id)


@router.get("/result/{session_id}")
async def get_result(session_id: str, sessions: dict = Depends(get_sessions)) -> dict:
    """FinalContent of a completed build"""
    session = sessions.get(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    if session.state.phase != PipelinePhase.COMPLETED or session.result is None:
        raise HTTPException(
            status_code=404,
            detail=f"Build not ready. Current phase: {session.state.phase.value}"
        )
    return session.result.to_wire()
