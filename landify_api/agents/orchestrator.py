"""Content pipeline orchestrator - drives analysis, strategy and synthesis"""

import asyncio
import logging
import uuid
from typing import Any, AsyncIterator, Dict, Optional
from landify_api.agents.analysis import analyze_business, quick_analysis
from landify_api.agents.client import CompletionGateway
from landify_api.agents.strategy import plan_content, quick_content
from landify_api.agents.synthesis import SynthesisPolicy, synthesize, synthesize_fast
from landify_api.core.state_machine import PipelinePhase, PipelineState
from landify_api.models.business import BusinessData, GenerationPreferences
from landify_api.models.content import ErrorEvent, FinalContent, PipelineEvent, ProgressEvent, ResultEvent
from landify_api.models.errors import ApplicationError, ErrorCode

logger = logging.getLogger(__name__)

STRATEGIES = ("thorough", "fast")

CAPABILITIES: Dict[str, Dict[str, Any]] = {
    "thorough": {
        "agents": [
            {"id": "business_analyst", "name": "Business Analysis Agent", "description": "Analyzes market positioning and customer psychology"},
            {"id": "content_strategist", "name": "Content Strategy Agent", "description": "Creates compelling content and messaging"},
            {"id": "synthesis_agent", "name": "Synthesis Agent", "description": "Combines all insights into final content"},
        ],
        "features": [
            "Business context analysis",
            "Content strategy generation",
            "Self-critique refinement",
            "AI-generated theme and layout",
        ],
        "limitations": ["Requires OpenAI API key", "Internet connection required"],
    },
    "fast": {
        "agents": [
            {"id": "fast_analyzer", "name": "Fast Analysis Agent", "description": "Rapid business analysis with parallel processing"},
            {"id": "fast_content", "name": "Fast Content Agent", "description": "Streamlined content generation"},
            {"id": "fast_html", "name": "Fast HTML Generator", "description": "Single-pass HTML generation with a category theme"},
        ],
        "features": [
            "Parallel processing",
            "Streamlined prompts",
            "Template-backed generation",
        ],
        "limitations": ["Requires OpenAI API key", "Less detailed analysis than the thorough strategy"],
    },
}


class ContentPipeline:
    """
    Turns BusinessData into FinalContent through the three stages.

    Two strategies share one interface: "thorough" runs the stages in
    sequence with critique passes and an AI theme; "fast" runs analysis and
    content together and uses the category theme. Runs share no mutable
    state, so one pipeline can serve concurrent requests.
    """

    def __init__(
        self,
        gateway: CompletionGateway,
        *,
        strategy: str = "thorough",
        policy: str = "fallback",
        critique: bool = True,
    ):
        self.gateway = gateway
        self.strategy = self._resolve_strategy(strategy)
        self.policy = SynthesisPolicy(policy)
        self.critique = critique

    @staticmethod
    def _resolve_strategy(strategy: Optional[str]) -> str:
        if strategy not in STRATEGIES:
            raise ApplicationError(
                code=ErrorCode.INVALID_REQUEST,
                message=f"Unknown generation strategy: {strategy!r}",
                hint=f"Use one of: {', '.join(STRATEGIES)}"
            )
        return strategy

    async def generate(
        self,
        business: BusinessData,
        *,
        strategy: Optional[str] = None,
        preferences: Optional[GenerationPreferences] = None,
    ) -> FinalContent:
        """Run the pipeline to completion; the first fatal error is raised"""
        state = PipelineState(str(uuid.uuid4()))
        result: Optional[FinalContent] = None
        try:
            async for event in self._run(business, strategy, preferences, state):
                if isinstance(event, ResultEvent):
                    result = event.data
        except ApplicationError as e:
            state.fail(e.message, e.code.value)
            raise
        return result

    async def generate_with_progress(
        self,
        business: BusinessData,
        *,
        strategy: Optional[str] = None,
        preferences: Optional[GenerationPreferences] = None,
        state: Optional[PipelineState] = None,
    ) -> AsyncIterator[PipelineEvent]:
        """
        Yield progress events, then exactly one ResultEvent or ErrorEvent.

        Failures never escape the generator; they become the closing
        ErrorEvent and mark `state` as failed.
        """
        state = state or PipelineState(str(uuid.uuid4()))
        try:
            async for event in self._run(business, strategy, preferences, state):
                yield event
        except ApplicationError as e:
            logger.error(f"[Pipeline] {state.run_id} failed: {e.code.value} - {e.message}")
            state.fail(e.message, e.code.value)
            yield ErrorEvent(code=e.code.value, message=e.message, retryable=e.retryable)
        except Exception as e:
            logger.exception(f"[Pipeline] {state.run_id} failed unexpectedly")
            state.fail(str(e), ErrorCode.GENERATION_FAILED.value)
            yield ErrorEvent(code=ErrorCode.GENERATION_FAILED.value, message=f"Generation failed: {e}", retryable=False)

    def capabilities(self, strategy: Optional[str] = None) -> Dict[str, Any]:
        """Describe the agents and features of a strategy"""
        name = self._resolve_strategy(strategy or self.strategy)
        return {"strategy": name, "policy": self.policy.value, "critique": self.critique, **CAPABILITIES[name]}

    @staticmethod
    def _progress(state: PipelineState, phase: PipelinePhase, stage: str, progress: int, message: str) -> ProgressEvent:
        state.advance(phase, message, stage=stage, progress=progress)
        return ProgressEvent(stage=stage, progress=progress, message=message)

    async def _run(
        self,
        business: BusinessData,
        strategy: Optional[str],
        preferences: Optional[GenerationPreferences],
        state: PipelineState,
    ) -> AsyncIterator[PipelineEvent]:
        name = self._resolve_strategy(strategy or self.strategy)
        state.metadata.update({"strategy": name, "business": business.name})
        logger.info(f"[Pipeline] {state.run_id}: {name} generation for {business.name}")

        if name == "fast":
            runner = self._run_fast(business, state)
        else:
            runner = self._run_thorough(business, preferences, state)
        async for event in runner:
            yield event

    async def _run_thorough(
        self,
        business: BusinessData,
        preferences: Optional[GenerationPreferences],
        state: PipelineState,
    ) -> AsyncIterator[PipelineEvent]:
        yield self._progress(state, PipelinePhase.IDLE, "starting", 0, "🤖 Initializing multi-agent system...")

        yield self._progress(state, PipelinePhase.ANALYZING, "business_analysis", 10, "🔍 Business analysis agent starting...")
        analysis = await analyze_business(self.gateway, business, preferences, critique=self.critique)
        yield self._progress(
            state, PipelinePhase.ANALYZING, "business_analysis", 33,
            f"✅ Business analysis complete (confidence {analysis.confidence}%)"
        )

        yield self._progress(state, PipelinePhase.STRATEGIZING, "content_strategy", 35, "✍️ Content strategy agent starting...")
        strategy_result = await plan_content(self.gateway, business, analysis, critique=self.critique)
        yield self._progress(
            state, PipelinePhase.STRATEGIZING, "content_strategy", 66,
            f"✅ Content strategy complete (confidence {strategy_result.confidence}%)"
        )

        yield self._progress(state, PipelinePhase.SYNTHESIZING, "synthesis", 70, "🎨 Synthesis agent creating final content...")
        content = await synthesize(self.gateway, business, analysis, strategy_result, policy=self.policy)
        yield self._progress(state, PipelinePhase.SYNTHESIZING, "synthesis", 95, "✅ Landing page assembled")

        yield self._progress(state, PipelinePhase.COMPLETED, "completed", 100, "✨ Multi-agent generation complete!")
        logger.info(f"[Pipeline] {state.run_id}: completed (fallbacks: {content.meta.fallbacks if content.meta else []})")
        yield ResultEvent(data=content)

    async def _run_fast(self, business: BusinessData, state: PipelineState) -> AsyncIterator[PipelineEvent]:
        yield self._progress(state, PipelinePhase.IDLE, "starting", 0, "🚀 Fast AI generation starting...")
        yield self._progress(
            state, PipelinePhase.ANALYZING, "parallel_analysis", 20,
            "⚡ Running parallel analysis and content generation..."
        )

        # Both calls are in flight before either resolves
        tasks = [
            asyncio.create_task(quick_analysis(self.gateway, business)),
            asyncio.create_task(quick_content(self.gateway, business)),
        ]
        try:
            analysis, strategy_result = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            raise

        yield self._progress(state, PipelinePhase.SYNTHESIZING, "html_generation", 70, "🎨 Generating optimized HTML...")
        content = await synthesize_fast(self.gateway, business, analysis, strategy_result, policy=self.policy)

        yield self._progress(state, PipelinePhase.SYNTHESIZING, "finalizing", 90, "✨ Finalizing landing page...")
        yield self._progress(state, PipelinePhase.COMPLETED, "completed", 100, "🎉 Fast generation complete!")
        logger.info(f"[Pipeline] {state.run_id}: completed (fallbacks: {content.meta.fallbacks if content.meta else []})")
        yield ResultEvent(data=content)
