"""Request and response schemas for the HTTP API"""

from datetime import datetime
from typing import Literal, Optional
from landify_api.models.base import WireModel
from landify_api.models.business import BusinessData, GenerationPreferences
from landify_api.models.content import FinalContent


class GenerateRequest(WireModel):
    """Body of POST /api/content-generation/generate, /sse/generate and /api/build"""
    business_data: BusinessData
    strategy: Optional[Literal["thorough", "fast"]] = None
    preferences: Optional[GenerationPreferences] = None


class BuildResponse(WireModel):
    """Response for build requests"""
    session_id: str
    status: str = "started"


class PageRequest(WireModel):
    """Body of POST /api/pages and PUT /api/pages/{id}"""
    business_data: BusinessData
    content: FinalContent


class StoredPage(WireModel):
    """A saved landing page"""
    id: str
    business_data: BusinessData
    content: FinalContent
    created_at: datetime
    updated_at: datetime
