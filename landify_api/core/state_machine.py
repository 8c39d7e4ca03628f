"""Pipeline state machine"""

from enum import Enum
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


class PipelinePhase(str, Enum):
    """Pipeline phases

    IDLE → ANALYZING → STRATEGIZING → SYNTHESIZING → COMPLETED
              ↘──────────────ERROR──────────────↗
    """
    IDLE = "idle"
    ANALYZING = "analyzing"
    STRATEGIZING = "strategizing"
    SYNTHESIZING = "synthesizing"
    COMPLETED = "completed"
    ERROR = "error"


# Forward-only ordering of the non-error phases
_ORDER = {
    PipelinePhase.IDLE: 0,
    PipelinePhase.ANALYZING: 1,
    PipelinePhase.STRATEGIZING: 2,
    PipelinePhase.SYNTHESIZING: 3,
    PipelinePhase.COMPLETED: 4,
}


class PipelineState:
    """Tracks one pipeline run: current phase, progress and an event log for replay"""

    def __init__(self, run_id: str):
        self.run_id = run_id
        self.phase = PipelinePhase.IDLE
        self.progress = 0
        self.started_at: Optional[datetime] = None
        self.last_updated: Optional[datetime] = None
        self.metadata: Dict[str, Any] = {}
        self.event_log: List[Dict[str, Any]] = []

    def advance(self, phase: PipelinePhase, detail: str = "", stage: Optional[str] = None, progress: Optional[int] = None) -> bool:
        """Move forward to `phase` (or stay in it) and log the event.

        Returns False when the transition is refused: the run is terminal, the
        phase would go backwards, or ERROR is requested (use fail()).
        """
        if phase == PipelinePhase.ERROR:
            return False
        if self.is_terminal():
            logger.debug(f"[State] {self.run_id}: ignoring {phase.value} after {self.phase.value}")
            return False
        if _ORDER[phase] < _ORDER[self.phase]:
            logger.warning(f"[State] {self.run_id}: refusing backwards move {self.phase.value} -> {phase.value}")
            return False
        if progress is not None:
            self.progress = max(self.progress, min(progress, 100))
        self.log_event(phase, detail, stage=stage)
        return True

    def fail(self, message: str, code: Optional[str] = None):
        """Enter ERROR from any non-terminal phase; in ERROR only the message is updated"""
        if self.phase == PipelinePhase.COMPLETED:
            logger.warning(f"[State] {self.run_id}: ignoring failure after completion: {message}")
            return
        already_failed = self.phase == PipelinePhase.ERROR
        if code:
            self.metadata["error_code"] = code
        self.metadata["error"] = message
        if already_failed:
            logger.info(f"[State] {self.run_id}: error updated: {message}")
            return
        self.log_event(PipelinePhase.ERROR, message, stage="error")

    def log_event(self, phase: PipelinePhase, event: str, stage: Optional[str] = None):
        """Append an event to the log and update the current phase"""
        if not isinstance(event, str):
            event = str(event) if event is not None else ""

        now = datetime.now(timezone.utc)

        # Same phase and detail within one second is a duplicate
        if self.event_log and self.last_updated:
            recent = self.event_log[-1]
            if (recent.get("phase") == phase.value
                    and recent.get("detail", "").strip().lower() == event.strip().lower()
                    and (now - self.last_updated).total_seconds() < 1.0):
                logger.debug(f"[State] Skipping duplicate event: {event} ({phase.value})")
                return

        self.event_log.append({
            "ts": now.isoformat().replace("+00:00", "Z"),
            "phase": phase.value,
            "stage": stage or phase.value,
            "progress": self.progress,
            "detail": event,
        })
        self.phase = phase
        self.last_updated = now
        if not self.started_at:
            self.started_at = now

    def get_latest_event(self) -> Optional[Dict[str, Any]]:
        if not self.event_log:
            return None
        return self.event_log[-1]

    def is_terminal(self) -> bool:
        """Check if the run is in a terminal state"""
        return self.phase in (PipelinePhase.COMPLETED, PipelinePhase.ERROR)
