"""Server-Sent Events: live generation stream and build progress replay"""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from landify_api.agents.orchestrator import ContentPipeline
from landify_api.api.deps import enforce_rate_limit, get_pipeline, get_sessions
from landify_api.core.state_machine import PipelinePhase
from landify_api.models.content import ErrorEvent, ProgressEvent, ResultEvent
from landify_api.models.errors import ErrorCode
from landify_api.models.schemas import GenerateRequest
import asyncio
import json
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}
POLL_INTERVAL_SECONDS = 0.5
MAX_STREAM_SECONDS = 20 * 60


def _sse(payload: dict) -> str:
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


@router.post("/generate", dependencies=[Depends(enforce_rate_limit)])
async def stream_generation(request: GenerateRequest, pipeline: ContentPipeline = Depends(get_pipeline)):
    """
    Run the pipeline and stream its events.

    Each event is one `data: {...}` line: progress events, then a single
    result or error event.
    """
    logger.info(f"SSE /sse/generate for {request.business_data.name}")

    async def generate():
        async for event in pipeline.generate_with_progress(
            request.business_data,
            strategy=request.strategy,
            preferences=request.preferences,
        ):
            yield _sse(event.to_wire())

    return StreamingResponse(generate(), media_type="text/event-stream", headers=SSE_HEADERS)


@router.get("/progress/{session_id}")
async def stream_progress(session_id: str, sessions: dict = Depends(get_sessions)):
    """
    Replay a build session's progress log, then follow it until it ends.

    Event format matches /sse/generate, with the log timestamp added:
    {"type": "progress", "stage": "content_strategy", "progress": 35, "message": "...", "ts": "..."}
    """
    session = sessions.get(session_id)
    if not session:
        logger.warning(f"SSE: Session NOT FOUND: {session_id}")
        raise HTTPException(status_code=404, detail="Session not found")

    async def generate():
        sent = 0
        waited = 0.0
        while True:
            log = session.state.event_log
            for entry in log[sent:]:
                if entry["phase"] == PipelinePhase.ERROR.value:
                    continue
                event = ProgressEvent(stage=entry["stage"], progress=entry["progress"], message=entry["detail"])
                yield _sse({**event.to_wire(), "ts": entry["ts"]})
            sent = len(log)

            if session.state.is_terminal():
                if session.result is not None:
                    yield _sse(ResultEvent(data=session.result).to_wire())
                else:
                    error = ErrorEvent(
                        code=session.state.metadata.get("error_code", ErrorCode.GENERATION_FAILED.value),
                        message=session.state.metadata.get("error", "Generation failed"),
                    )
                    yield _sse(error.to_wire())
                logger.info(f"SSE: Stream closing for session {session_id} - terminal state: {session.state.phase.value}")
                return

            if waited >= MAX_STREAM_SECONDS:
                logger.warning(f"SSE: Timeout for session {session_id}")
                yield _sse(ErrorEvent(code=ErrorCode.GENERATION_FAILED.value, message="Build timeout - stream closed", retryable=True).to_wire())
                return

            await asyncio.sleep(POLL_INTERVAL_SECONDS)
            waited += POLL_INTERVAL_SECONDS

    return StreamingResponse(generate(), media_type="text/event-stream", headers=SSE_HEADERS)
