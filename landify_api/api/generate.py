"""Synchronous content generation endpoints"""

from typing import Optional
from fastapi import APIRouter, Depends
from landify_api.agents.orchestrator import ContentPipeline
from landify_api.api.deps import enforce_rate_limit, get_pipeline
from landify_api.models.schemas import GenerateRequest
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/generate", dependencies=[Depends(enforce_rate_limit)])
async def generate_content(request: GenerateRequest, pipeline: ContentPipeline = Depends(get_pipeline)) -> dict:
    """Run the whole pipeline and return the FinalContent as camelCase JSON"""
    logger.info(f"POST /api/content-generation/generate for {request.business_data.name} (strategy: {request.strategy or pipeline.strategy})")
    content = await pipeline.generate(
        request.business_data,
        strategy=request.strategy,
        preferences=request.preferences,
    )
    return content.to_wire()


@router.get("/capabilities")
async def get_capabilities(strategy: Optional[str] = None, pipeline: ContentPipeline = Depends(get_pipeline)) -> dict:
    """Describe the agents and features of a generation strategy"""
    return pipeline.capabilities(strategy)
