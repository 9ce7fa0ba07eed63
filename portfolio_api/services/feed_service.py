"""
Ordered image feed service.

Keeps display_order dense and zero-based across all gallery images and exposes
paginated reads, like counting, admin reordering and delete-with-reindex.

Administrative writes (create, reorder, delete, repair) take the feed lock first:
bumping the single FeedState row holds a row lock until commit, so those writes
are serialized across connections. Each write commits its own transaction and
rolls back completely on failure.
"""
from contextlib import asynccontextmanager
from dataclasses import dataclass
from collections import Counter
from typing import List, Optional, Sequence
import logging

from sqlalchemy import select, update, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.config import settings
from portfolio_api.errors import (
    FeedError,
    NotFoundError,
    InvalidInputError,
    ConflictError,
    PersistenceError,
)
from portfolio_api.models import GalleryImage, FeedState, FEED_STATE_ID, MAX_IMAGE_ID
from portfolio_api.schemas import GalleryImageCreate, UploaderProfile, OrderReport

logger = logging.getLogger(__name__)

SEED_IMAGES = [
    GalleryImageCreate(
        src="https://files.catbox.moe/weul01.jpg",
        alt="Narvent - Fainted album art",
        caption="Narvent - Fainted",
        hashtags=["Gudd", "nice", "music"],
    ),
    GalleryImageCreate(
        src="https://files.catbox.moe/k23ytz.jpg",
        alt="K-391 & Alan Walker - Ignite album art",
        caption="K-391 & Alan Walker - Ignite (feat. Julie Bergan & Seungri)",
        hashtags=["nice", "edm", "walker"],
    ),
]


@dataclass
class FeedPage:
    images: List[GalleryImage]
    has_more: bool
    total: int
    page: int
    page_size: int


@asynccontextmanager
async def _transaction(db: AsyncSession, action: str):
    """
    Commit on success, roll back on any failure.
    Storage errors surface as PersistenceError; FeedErrors pass through unchanged.
    """
    try:
        yield
        await db.commit()
    except FeedError:
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        logger.error(f"Failed to {action}: {str(e)}", exc_info=True)
        raise PersistenceError(f"Failed to {action}: {str(e)}") from e


async def _lock_feed(db: AsyncSession) -> int:
    """Bump the feed revision inside the current transaction and return the new value."""
    result = await db.execute(
        update(FeedState)
        .where(FeedState.id == FEED_STATE_ID)
        .values(revision=FeedState.revision + 1)
        .returning(FeedState.revision)
        .execution_options(synchronize_session=False)
    )
    revision = result.scalar_one_or_none()
    if revision is None:
        db.add(FeedState(id=FEED_STATE_ID, revision=1))
        await db.flush()
        revision = 1
    return revision


async def _count(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(GalleryImage))
    return result.scalar_one()


def _ordered_images():
    return (
        select(GalleryImage)
        .order_by(GalleryImage.display_order.asc(), GalleryImage.id.asc())
        .execution_options(populate_existing=True)
    )


async def create_image(
    db: AsyncSession,
    data: GalleryImageCreate,
    uploader: UploaderProfile,
) -> GalleryImage:
    """
    Append a new image to the end of the feed.

    The order is the record count read under the feed lock, so concurrent
    creates never share an order value.

    Raises:
        PersistenceError: If the write fails
    """
    async with _transaction(db, "create image"):
        await _lock_feed(db)
        total = await _count(db)

        alt = (data.alt or "").strip() or data.caption
        image = GalleryImage(
            src=data.src,
            alt=alt,
            caption=data.caption,
            hashtags=list(data.hashtags),
            likes=0,
            display_order=total,
            uploader_name=uploader.name,
            uploader_avatar_url=uploader.avatar_url,
        )
        db.add(image)
        await db.flush()
        await db.refresh(image)

    logger.info(f"Created image ID {image.id} at order {image.display_order}")
    return image


async def list_page(
    db: AsyncSession,
    page: int = 1,
    page_size: Optional[int] = None,
) -> FeedPage:
    """
    Get one page of images ordered by display_order.

    Pages past the end return no images and has_more=False.

    Raises:
        InvalidInputError: If page < 1 or page_size is outside 1..MAX_PAGE_SIZE
        PersistenceError: If the query fails
    """
    if page_size is None:
        page_size = settings.DEFAULT_PAGE_SIZE
    if page < 1:
        raise InvalidInputError("page must be 1 or greater")
    if page_size < 1 or page_size > settings.MAX_PAGE_SIZE:
        raise InvalidInputError(f"page_size must be between 1 and {settings.MAX_PAGE_SIZE}")

    try:
        total = await _count(db)
        result = await db.execute(
            _ordered_images().offset((page - 1) * page_size).limit(page_size)
        )
        images = list(result.scalars().all())
    except Exception as e:
        logger.error(f"Failed to retrieve image page {page}: {str(e)}", exc_info=True)
        raise PersistenceError(f"Failed to retrieve images: {str(e)}") from e

    has_more = page * page_size < total
    logger.debug(f"Retrieved {len(images)} images (page: {page}, size: {page_size}, total: {total})")
    return FeedPage(images=images, has_more=has_more, total=total, page=page, page_size=page_size)


async def list_all(db: AsyncSession) -> List[GalleryImage]:
    """Get every image in feed order (admin reorder view)."""
    try:
        result = await db.execute(_ordered_images())
        return list(result.scalars().all())
    except Exception as e:
        logger.error(f"Failed to retrieve images: {str(e)}", exc_info=True)
        raise PersistenceError(f"Failed to retrieve images: {str(e)}") from e


async def get_revision(db: AsyncSession) -> int:
    """Current feed revision; 0 before the first administrative write."""
    try:
        result = await db.execute(
            select(FeedState.revision).where(FeedState.id == FEED_STATE_ID)
        )
        return result.scalar_one_or_none() or 0
    except Exception as e:
        logger.error(f"Failed to read feed revision: {str(e)}", exc_info=True)
        raise PersistenceError(f"Failed to read feed revision: {str(e)}") from e


def _check_image_id(image_id: int) -> None:
    """IDs the integer primary key cannot hold can never exist."""
    if not 1 <= image_id <= MAX_IMAGE_ID:
        raise NotFoundError(f"Image ID {image_id} does not exist")


async def increment_like(db: AsyncSession, image_id: int) -> int:
    """
    Atomically add one like and return the new count.
    Likes are never decremented server-side.

    Raises:
        NotFoundError: If the image does not exist
    """
    _check_image_id(image_id)
    async with _transaction(db, f"like image {image_id}"):
        result = await db.execute(
            update(GalleryImage)
            .where(GalleryImage.id == image_id)
            .values(likes=GalleryImage.likes + 1)
            .returning(GalleryImage.likes)
            .execution_options(synchronize_session=False)
        )
        likes = result.scalar_one_or_none()
        if likes is None:
            raise NotFoundError(f"Image ID {image_id} does not exist")

    return likes


def _validate_permutation(image_ids: Sequence[int], existing_ids: set) -> None:
    seen = set()
    duplicates = set()
    for image_id in image_ids:
        if image_id in seen:
            duplicates.add(image_id)
        seen.add(image_id)

    unknown = seen - existing_ids
    missing = existing_ids - seen
    if duplicates or unknown or missing:
        raise InvalidInputError({
            "message": "image_ids must list every existing image exactly once",
            "duplicates": sorted(duplicates),
            "unknown": sorted(unknown),
            "missing": sorted(missing),
        })


async def reorder(
    db: AsyncSession,
    image_ids: Sequence[int],
    expected_revision: Optional[int] = None,
) -> int:
    """
    Rewrite display_order so each image sits at its index in image_ids.

    image_ids must be a permutation of all existing image IDs. The update is
    a single batched write; nothing is applied if any part fails.

    Args:
        db: Database session
        image_ids: Every image ID in the desired order
        expected_revision: Revision the caller read; mismatch means a concurrent edit

    Returns:
        int: The new feed revision

    Raises:
        InvalidInputError: If image_ids is not a permutation of the existing IDs
        ConflictError: If expected_revision is stale
        PersistenceError: If the write fails
    """
    async with _transaction(db, "reorder images"):
        revision = await _lock_feed(db)
        if expected_revision is not None and expected_revision != revision - 1:
            raise ConflictError(
                f"Feed is at revision {revision - 1}, request was based on revision {expected_revision}"
            )

        result = await db.execute(select(GalleryImage.id))
        _validate_permutation(image_ids, set(result.scalars().all()))

        if image_ids:
            await db.execute(
                update(GalleryImage),
                [
                    {"id": image_id, "display_order": position}
                    for position, image_id in enumerate(image_ids)
                ],
            )

    logger.info(f"Reordered {len(image_ids)} images (revision {revision})")
    return revision


async def delete_image(db: AsyncSession, image_id: int) -> None:
    """
    Delete an image and close the gap it leaves in display_order.

    The shift only runs after the delete removed exactly one row, and both
    happen in one transaction.

    Raises:
        NotFoundError: If the image does not exist
        PersistenceError: If the write fails
    """
    _check_image_id(image_id)
    async with _transaction(db, f"delete image {image_id}"):
        await _lock_feed(db)

        result = await db.execute(
            select(GalleryImage.display_order).where(GalleryImage.id == image_id)
        )
        deleted_order = result.scalar_one_or_none()
        if deleted_order is None:
            raise NotFoundError(f"Image ID {image_id} does not exist")

        result = await db.execute(
            delete(GalleryImage)
            .where(GalleryImage.id == image_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise PersistenceError(f"Delete of image ID {image_id} affected {result.rowcount} rows")

        shifted = await db.execute(
            update(GalleryImage)
            .where(GalleryImage.display_order > deleted_order)
            .values(display_order=GalleryImage.display_order - 1)
            .execution_options(synchronize_session=False)
        )

    logger.info(
        f"Deleted image ID {image_id} at order {deleted_order}, shifted {shifted.rowcount} images"
    )


async def check_order(db: AsyncSession) -> OrderReport:
    """Report gaps and duplicates in display_order without changing anything."""
    try:
        result = await db.execute(select(GalleryImage.display_order))
        orders = list(result.scalars().all())
    except Exception as e:
        logger.error(f"Failed to check image order: {str(e)}", exc_info=True)
        raise PersistenceError(f"Failed to check image order: {str(e)}") from e

    counts = Counter(orders)
    duplicates = sorted(order for order, n in counts.items() if n > 1)
    gaps = sorted(set(range(len(orders))) - set(orders))
    return OrderReport(
        total=len(orders),
        is_dense=sorted(orders) == list(range(len(orders))),
        gaps=gaps,
        duplicates=duplicates,
    )


async def repair_order(db: AsyncSession) -> int:
    """
    Re-derive dense order from the current relative order.
    Ties (duplicates) are broken by created_at, then id.

    Returns:
        int: Number of images whose order changed
    """
    async with _transaction(db, "repair image order"):
        await _lock_feed(db)
        result = await db.execute(
            select(GalleryImage.id, GalleryImage.display_order).order_by(
                GalleryImage.display_order.asc(),
                GalleryImage.created_at.asc(),
                GalleryImage.id.asc(),
            )
        )
        changes = [
            {"id": image_id, "display_order": position}
            for position, (image_id, current) in enumerate(result.all())
            if current != position
        ]
        if changes:
            await db.execute(update(GalleryImage), changes)

    if changes:
        logger.warning(f"Repaired display_order for {len(changes)} images")
    return len(changes)


async def seed_database(db: AsyncSession, uploader: UploaderProfile) -> int:
    """Insert the default images when the feed is empty. Returns how many were added."""
    if await _count(db) > 0:
        logger.info("Database already contains images, skipping seed")
        return 0

    for data in SEED_IMAGES:
        await create_image(db, data, uploader)
    logger.info(f"Database seeded with {len(SEED_IMAGES)} images")
    return len(SEED_IMAGES)
