"""Business input models and Google Places results"""

from typing import List, Literal, Optional
from pydantic import Field, field_validator
from landify_api.models.base import FrozenWireModel, WireModel


class Coordinates(FrozenWireModel):
    """Geographic coordinates"""
    lat: float
    lng: float


class BusinessHours(FrozenWireModel):
    """Opening hours, one free-text entry per weekday"""
    monday: Optional[str] = None
    tuesday: Optional[str] = None
    wednesday: Optional[str] = None
    thursday: Optional[str] = None
    friday: Optional[str] = None
    saturday: Optional[str] = None
    sunday: Optional[str] = None

    @classmethod
    def from_weekday_text(cls, weekday_text: List[str]) -> "BusinessHours":
        """Build from Google's ["Monday: 9:00 AM – 5:00 PM", ...] format"""
        hours = {}
        for line in weekday_text:
            day, sep, value = line.partition(":")
            day = day.strip().lower()
            if sep and day in cls.model_fields:
                hours[day] = value.strip()
        return cls(**hours)

    def is_empty(self) -> bool:
        return not any(self.model_dump().values())


class SocialLinks(FrozenWireModel):
    """Social media profile URLs"""
    facebook: Optional[str] = None
    instagram: Optional[str] = None
    twitter: Optional[str] = None
    linkedin: Optional[str] = None


class BusinessData(FrozenWireModel):
    """Business the landing page is generated for.

    Immutable once handed to the pipeline; owned by the caller (manual entry
    form or a Places lookup).
    """
    name: str = Field(..., min_length=1)
    type: str = "business"
    description: str = ""
    address: str = ""
    phone: str = ""
    email: Optional[str] = None
    website: Optional[str] = None
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    reviews: Optional[int] = Field(default=None, ge=0)
    hours: Optional[BusinessHours] = None
    photos: List[str] = Field(default_factory=list)
    amenities: List[str] = Field(default_factory=list)
    social_media: Optional[SocialLinks] = None
    coordinates: Optional[Coordinates] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Business name is required")
        return v

    @field_validator("type")
    @classmethod
    def type_default(cls, v: str) -> str:
        return v.strip() or "business"


class GenerationPreferences(FrozenWireModel):
    """Optional user requirements forwarded to the analysis stage"""
    tone: Optional[Literal["professional", "friendly", "casual", "luxury"]] = None
    style: Optional[Literal["modern", "classic", "minimalist", "bold"]] = None
    target_audience: Optional[str] = None
    special_requests: Optional[str] = None


class PlaceSearchResult(WireModel):
    """One row of a Places text search"""
    place_id: str
    name: str
    address: str = ""
    rating: float = 0
    review_count: int = 0
    category: str = "business"
    coordinates: Optional[Coordinates] = None


class PlaceDetails(WireModel):
    """Place details used to pre-fill BusinessData"""
    place_id: str
    name: str
    address: str = ""
    phone: Optional[str] = None
    website: Optional[str] = None
    hours: List[str] = Field(default_factory=list)
    amenities: List[str] = Field(default_factory=list)
    coordinates: Optional[Coordinates] = None
    rating: Optional[float] = None
    review_count: Optional[int] = None
    category: str = "business"
    business_status: Optional[str] = None
    photos: List[str] = Field(default_factory=list)
