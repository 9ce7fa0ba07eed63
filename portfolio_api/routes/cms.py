"""
CMS API routes for the image feed.
All endpoints require a valid admin token (cookie or Bearer header).
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from portfolio_api.database import get_db
from portfolio_api.schemas import (
    AdminImageListResponse,
    GalleryImageCreate,
    GalleryImageResponse,
    ImageReorderRequest,
    OrderReport,
)
from portfolio_api.services import feed_service
from portfolio_api.utils.auth import get_admin_profile
from portfolio_api.utils.jwt_auth import verify_cms_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cms", tags=["CMS"], dependencies=[Depends(verify_cms_token)])


@router.get("/images", response_model=AdminImageListResponse)
async def get_cms_gallery_images(db: AsyncSession = Depends(get_db)):
    """
    Get all gallery images for the CMS dashboard, in display order.

    The returned revision can be passed to the reorder endpoint so that a
    reorder based on a stale list is rejected.
    """
    revision = await feed_service.get_revision(db)
    images = await feed_service.list_all(db)

    logger.info(f"Retrieved {len(images)} gallery images for CMS (revision {revision})")

    return AdminImageListResponse(
        images=[GalleryImageResponse.from_model(img) for img in images],
        revision=revision,
    )


@router.post("/images", response_model=GalleryImageResponse, status_code=status.HTTP_201_CREATED)
async def add_cms_gallery_image(
    image: GalleryImageCreate,
    db: AsyncSession = Depends(get_db)
):
    """
    Add an image to the end of the feed.
    The uploader is the current admin profile, captured at creation time.
    """
    created = await feed_service.create_image(db, image, get_admin_profile())
    return GalleryImageResponse.from_model(created)


@router.put("/images/reorder")
async def reorder_gallery_images(
    request: ImageReorderRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Reorder gallery images.

    The frontend sends every image ID in the desired display order. Each
    image's order becomes its index in that list.

    Raises:
        InvalidInputError: 400 if image_ids is not exactly the set of existing IDs
        ConflictError: 409 if revision is stale
    """
    revision = await feed_service.reorder(db, request.image_ids, expected_revision=request.revision)

    return {
        "message": f"Successfully reordered {len(request.image_ids)} images",
        "count": len(request.image_ids),
        "revision": revision,
    }


@router.delete("/images/{image_id}")
async def delete_cms_gallery_image(
    image_id: int,
    db: AsyncSession = Depends(get_db)
):
    """
    Delete a gallery image and shift later images up by one.

    Raises:
        NotFoundError: 404 if the image does not exist
    """
    await feed_service.delete_image(db, image_id)
    return {"message": "Image deleted successfully", "image_id": image_id}


@router.get("/images/integrity", response_model=OrderReport)
async def check_gallery_order(db: AsyncSession = Depends(get_db)):
    """Report gaps or duplicates in display order."""
    return await feed_service.check_order(db)


@router.post("/images/repair-order")
async def repair_gallery_order(db: AsyncSession = Depends(get_db)):
    """Rebuild dense display order from the current relative order."""
    updated = await feed_service.repair_order(db)
    return {"message": f"Repaired order for {updated} images", "updated": updated}
