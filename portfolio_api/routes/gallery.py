"""
Gallery routes for the public image feed.
Provides the paginated feed used by infinite scroll and the like counter.
"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging

from portfolio_api.database import get_db
from portfolio_api.schemas import GalleryImageResponse, GalleryImagesPageResponse, LikeResponse
from portfolio_api.services import feed_service
from portfolio_api.utils.rate_limit import limiter, RATE_LIMITS

logger = logging.getLogger(__name__)

# Create router instance
router = APIRouter()


@router.get("/images", response_model=GalleryImagesPageResponse)
async def get_gallery_images(
    page: int = 1,
    page_size: Optional[int] = None,
    db: AsyncSession = Depends(get_db)
):
    """
    Get one page of gallery images ordered by display order.

    Args:
        page: 1-based page number (pages past the end return an empty list)
        page_size: Images per page (default: DEFAULT_PAGE_SIZE)
        db: Database session (injected by FastAPI dependency)

    Returns:
        GalleryImagesPageResponse: Images with has_more and total

    Raises:
        InvalidInputError: 400 if page or page_size is out of range
    """
    feed_page = await feed_service.list_page(db, page=page, page_size=page_size)

    return GalleryImagesPageResponse(
        images=[GalleryImageResponse.from_model(img) for img in feed_page.images],
        has_more=feed_page.has_more,
        total=feed_page.total,
        page=feed_page.page,
        page_size=feed_page.page_size,
    )


@router.post("/images/{image_id}/like", response_model=LikeResponse)
@limiter.limit(RATE_LIMITS["like"])
async def like_gallery_image(
    request: Request,
    image_id: int,
    db: AsyncSession = Depends(get_db)
):
    """
    Add one like to an image. There is no unlike on the server.

    Raises:
        NotFoundError: 404 if the image does not exist
    """
    likes = await feed_service.increment_like(db, image_id)
    logger.info(f"Image ID {image_id} liked, now {likes} likes")
    return LikeResponse(id=image_id, likes=likes)
