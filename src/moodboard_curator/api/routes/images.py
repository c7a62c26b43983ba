"""
Image search proxy endpoint.

Mirrors the provider boundary for clients that render the board
themselves: one page of mapped items per call.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query

from ...models.api_models import ImageSearchResponse
from ...providers.image_search import ImageSearchProvider
from ..dependencies import get_image_search


logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/images", tags=["Images"])


@router.get("", response_model=ImageSearchResponse)
async def search_images(
    q: str = Query(default="", description="Search text"),
    page: int = Query(default=1, ge=1),
    license_type: Optional[str] = Query(default=None, description="License filter, e.g. 'all-cc'"),
    image_search: ImageSearchProvider = Depends(get_image_search),
) -> ImageSearchResponse:
    """
    Search images.

    Provider failures propagate to the error handlers: rate limiting as 429
    with Retry-After, other upstream failures as 502.
    """
    items = await image_search.search(q, page=page, license_type=license_type)
    logger.info("Image search proxied", query=q, page=page, items=len(items))
    return ImageSearchResponse(items=items)
