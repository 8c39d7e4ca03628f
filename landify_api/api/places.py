"""Google Places proxy endpoints"""

from fastapi import APIRouter, Depends, Query
from landify_api.api.deps import get_places
from landify_api.core.google_fetcher import PlacesGateway, to_business_data
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/places/search")
async def search_places(query: str = Query(..., min_length=1), places: PlacesGateway = Depends(get_places)) -> dict:
    results = await places.search(query)
    return {"results": [r.to_wire() for r in results]}


@router.get("/places/autocomplete")
async def autocomplete_places(input: str = Query(..., min_length=1), places: PlacesGateway = Depends(get_places)) -> dict:
    return {"predictions": await places.autocomplete(input)}


@router.get("/places/details/{place_id}")
async def place_details(place_id: str, places: PlacesGateway = Depends(get_places)) -> dict:
    details = await places.details(place_id)
    return details.to_wire()


@router.get("/places/details/{place_id}/business-data")
async def place_business_data(place_id: str, places: PlacesGateway = Depends(get_places)) -> dict:
    """Place details already mapped to the generation input shape"""
    details = await places.details(place_id)
    return to_business_data(details).to_wire()
