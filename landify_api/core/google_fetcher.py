"""Google Places web service client - HTTP-based implementation"""

from typing import Optional, List, Dict, Any
import httpx
import logging
import asyncio
from landify_api.models.business import BusinessData, BusinessHours, Coordinates, PlaceDetails, PlaceSearchResult, SocialLinks
from landify_api.models.errors import ApplicationError, ErrorCode

logger = logging.getLogger(__name__)

PLACES_BASE = "https://maps.googleapis.com/maps/api/place"
DETAILS_FIELDS = [
    "place_id", "name", "formatted_address", "formatted_phone_number", "website",
    "business_status", "opening_hours", "types", "geometry", "rating",
    "user_ratings_total", "reviews", "photos",
]
MAX_PHOTOS = 6
MIN_AUTOCOMPLETE_CHARS = 2

# Google types that carry no category information
_GENERIC_TYPES = {"point_of_interest", "establishment", "premise", "food", "store"}

_SOCIAL_HOSTS = {
    "facebook": ("facebook.com",),
    "instagram": ("instagram.com",),
    "twitter": ("twitter.com", "x.com"),
    "linkedin": ("linkedin.com",),
}


class PlacesGateway:
    """
    Text search, autocomplete and details against the Google Places web service.

    Non-OK Google statuses become ApplicationErrors; ZERO_RESULTS is an empty
    answer. 429/5xx responses are retried with linear back-off.
    """

    def __init__(self, api_key: str, client: Optional[httpx.AsyncClient] = None, retries: int = 3, retry_delay: float = 0.7):
        if not api_key:
            logger.warning("GOOGLE_MAPS_API_KEY not set; place lookups will fail")
        self.api_key = api_key
        self.retries = retries
        self.retry_delay = retry_delay
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client"""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=20.0)
        return self._client

    async def close(self):
        """Close HTTP client"""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _get(self, url: str, params: Dict[str, Any]) -> httpx.Response:
        """HTTP GET with retry logic for 429/5xx errors"""
        client = await self._get_client()
        for i in range(self.retries):
            try:
                response = await client.get(url, params=params)
                if (response.status_code == 429 or response.status_code >= 500) and i < self.retries - 1:
                    await asyncio.sleep(self.retry_delay * (i + 1))
                    continue
                response.raise_for_status()
                return response
            except httpx.HTTPStatusError:
                if i == self.retries - 1:
                    raise
                await asyncio.sleep(self.retry_delay * (i + 1))
        raise httpx.HTTPError("Max retries exceeded")

    async def _call(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """Call a Places endpoint and translate transport and Google status errors"""
        if not self.api_key:
            raise ApplicationError(
                code=ErrorCode.CONFIGURATION_ERROR,
                message="Google Maps API key not configured. Please set GOOGLE_MAPS_API_KEY in .env file."
            )
        url = f"{PLACES_BASE}/{endpoint}/json"
        try:
            response = await self._get(url, {**params, "key": self.api_key})
        except httpx.HTTPStatusError as e:
            logger.error(f"[GOOGLE FETCH] HTTP error: {e.response.status_code} - {e.response.text}")
            if e.response.status_code == 429:
                raise ApplicationError(
                    code=ErrorCode.GOOGLE_RATE_LIMIT,
                    message="Google Places API rate limit exceeded",
                    retryable=True
                )
            raise ApplicationError(
                code=ErrorCode.PLACES_ERROR,
                message=f"Google Places API error: HTTP {e.response.status_code}",
                retryable=True
            )
        except httpx.HTTPError as e:
            logger.error(f"[GOOGLE FETCH] Transport error calling {endpoint}: {e}")
            raise ApplicationError(
                code=ErrorCode.PLACES_ERROR,
                message=f"Failed to reach Google Places API: {e}",
                retryable=True
            )

        data = response.json()
        status = data.get("status", "OK")
        if status in ("OK", "ZERO_RESULTS"):
            return data

        detail = data.get("error_message") or status
        logger.warning(f"[GOOGLE FETCH] {endpoint} returned status {status}: {detail}")
        if status in ("NOT_FOUND", "INVALID_REQUEST"):
            raise ApplicationError(code=ErrorCode.INVALID_PLACE_ID, message=f"Invalid place request: {detail}")
        if status == "OVER_QUERY_LIMIT":
            raise ApplicationError(code=ErrorCode.GOOGLE_RATE_LIMIT, message="Google Places API rate limit exceeded", retryable=True)
        if status == "REQUEST_DENIED":
            raise ApplicationError(
                code=ErrorCode.CONFIGURATION_ERROR,
                message=f"Google Places request denied: {detail}",
                hint="Check that GOOGLE_MAPS_API_KEY is valid and the Places API is enabled."
            )
        raise ApplicationError(code=ErrorCode.PLACES_ERROR, message=f"Google Places API error: {detail}", retryable=True)

    async def search(self, query: str) -> List[PlaceSearchResult]:
        """Text search for establishments"""
        logger.info(f"[GOOGLE FETCH] Text search: {query!r}")
        data = await self._call("textsearch", {"query": query, "type": "establishment"})
        results = []
        for place in data.get("results") or []:
            if not place.get("place_id") or not place.get("name"):
                continue
            results.append(PlaceSearchResult(
                place_id=place["place_id"],
                name=place["name"],
                address=place.get("formatted_address") or "",
                rating=place.get("rating") or 0,
                review_count=place.get("user_ratings_total") or 0,
                category=primary_category(place.get("types") or []),
                coordinates=_coordinates(place),
            ))
        logger.info(f"[GOOGLE FETCH] Text search returned {len(results)} places")
        return results

    async def autocomplete(self, text: str) -> List[Dict[str, Any]]:
        """Establishment predictions for a partial query; short input returns []"""
        if len(text.strip()) < MIN_AUTOCOMPLETE_CHARS:
            return []
        data = await self._call("autocomplete", {"input": text, "types": "establishment"})
        return [
            {
                "placeId": p.get("place_id"),
                "description": p.get("description", ""),
                "mainText": (p.get("structured_formatting") or {}).get("main_text", ""),
                "secondaryText": (p.get("structured_formatting") or {}).get("secondary_text", ""),
            }
            for p in data.get("predictions") or []
            if p.get("place_id")
        ]

    async def details(self, place_id: str) -> PlaceDetails:
        """Fetch details for one place"""
        if not place_id or not place_id.strip():
            raise ApplicationError(code=ErrorCode.INVALID_PLACE_ID, message="Place ID is required")
        logger.info(f"[GOOGLE FETCH] Fetching details for place_id: {place_id}")
        data = await self._call("details", {"place_id": place_id, "fields": ",".join(DETAILS_FIELDS)})
        place = data.get("result")
        if not place:
            raise ApplicationError(code=ErrorCode.INVALID_PLACE_ID, message=f"Place not found: {place_id}")

        types = place.get("types") or []
        return PlaceDetails(
            place_id=place.get("place_id") or place_id,
            name=place.get("name") or "Business",
            address=place.get("formatted_address") or "",
            phone=place.get("formatted_phone_number"),
            website=place.get("website"),
            hours=(place.get("opening_hours") or {}).get("weekday_text") or [],
            amenities=[t.replace("_", " ") for t in types if t not in _GENERIC_TYPES],
            coordinates=_coordinates(place),
            rating=place.get("rating"),
            review_count=place.get("user_ratings_total"),
            category=primary_category(types),
            business_status=place.get("business_status"),
            photos=[p["photo_reference"] for p in (place.get("photos") or [])[:MAX_PHOTOS] if p.get("photo_reference")],
        )


def primary_category(types: List[str]) -> str:
    """First specific Google type, e.g. ["point_of_interest", "restaurant"] -> "restaurant" """
    for t in types:
        if t not in _GENERIC_TYPES:
            return t
    return types[0] if types else "business"


def _coordinates(place: Dict[str, Any]) -> Optional[Coordinates]:
    location = (place.get("geometry") or {}).get("location")
    if not location or location.get("lat") is None or location.get("lng") is None:
        return None
    return Coordinates(lat=location["lat"], lng=location["lng"])


def _social_links(website: Optional[str]) -> Optional[SocialLinks]:
    """Businesses without a site often list a social profile as their website"""
    if not website:
        return None
    lowered = website.lower()
    found = {
        network: website
        for network, hosts in _SOCIAL_HOSTS.items()
        if any(host in lowered for host in hosts)
    }
    return SocialLinks(**found) if found else None


def to_business_data(details: PlaceDetails) -> BusinessData:
    """Pre-fill pipeline input from place details"""
    hours = BusinessHours.from_weekday_text(details.hours) if details.hours else None
    return BusinessData(
        name=details.name,
        type=details.category.replace("_", " "),
        address=details.address,
        phone=details.phone or "",
        website=details.website,
        rating=details.rating,
        reviews=details.review_count,
        hours=None if hours is None or hours.is_empty() else hours,
        photos=details.photos,
        amenities=details.amenities,
        social_media=_social_links(details.website),
        coordinates=details.coordinates,
    )
