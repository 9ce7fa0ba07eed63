"""
Pydantic schemas for request and response data validation.
Defines data structures for API endpoints with automatic validation and serialization.
"""
from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional, List


class UploaderProfile(BaseModel):
    """Snapshot of the admin profile stored on each image."""
    name: str
    avatar_url: Optional[str] = None


class GalleryImageResponse(BaseModel):
    """
    Response schema for a gallery image.
    Used by both the public feed and the CMS endpoints.
    """
    id: int
    src: str
    alt: str
    caption: str
    hashtags: List[str] = []
    likes: int
    order: int
    uploader: UploaderProfile
    created_at: datetime

    @classmethod
    def from_model(cls, image) -> "GalleryImageResponse":
        """Build a response from a GalleryImage row."""
        return cls(
            id=image.id,
            src=image.src,
            alt=image.alt,
            caption=image.caption,
            hashtags=list(image.hashtags or []),
            likes=image.likes or 0,
            order=image.display_order,
            uploader=UploaderProfile(
                name=image.uploader_name,
                avatar_url=image.uploader_avatar_url,
            ),
            created_at=image.created_at,
        )


class GalleryImagesPageResponse(BaseModel):
    """
    Paginated response for the public image feed.
    """
    images: List[GalleryImageResponse]
    has_more: bool
    total: int
    page: int
    page_size: int


class AdminImageListResponse(BaseModel):
    """
    Full ordered image list for the CMS reorder view.
    revision can be sent back with a reorder request to detect concurrent edits.
    """
    images: List[GalleryImageResponse]
    revision: int


class GalleryImageCreate(BaseModel):
    """
    Request schema for creating a gallery image.
    Used by POST /api/cms/images.
    """
    src: str = Field(min_length=1)
    caption: str = Field(min_length=1)
    alt: Optional[str] = None
    hashtags: List[str] = []

    @field_validator("hashtags")
    @classmethod
    def normalize_hashtags(cls, v):
        tags = []
        for tag in v:
            tag = tag.strip().lstrip("#").strip()
            if tag:
                tags.append(tag)
        return tags


class ImageReorderRequest(BaseModel):
    """
    Request schema for reordering gallery images.
    Used by PUT /api/cms/images/reorder.
    Contains every image ID in the desired display order.
    """
    image_ids: List[int]
    revision: Optional[int] = None

    @field_validator('image_ids')
    @classmethod
    def validate_unique_ids(cls, v):
        if len(v) != len(set(v)):
            raise ValueError('Duplicate image IDs are not allowed')
        return v


class LikeResponse(BaseModel):
    id: int
    likes: int


class OrderReport(BaseModel):
    """Result of checking the dense-order invariant."""
    total: int
    is_dense: bool
    gaps: List[int] = []
    duplicates: List[int] = []


class VisitorCountResponse(BaseModel):
    count: int


class LoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
