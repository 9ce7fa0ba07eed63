"""
Visitor counter routes.
"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.database import get_db
from portfolio_api.schemas import VisitorCountResponse
from portfolio_api.services import visitor_service
from portfolio_api.utils.rate_limit import limiter, RATE_LIMITS

router = APIRouter(prefix="/visitors", tags=["visitors"])


@router.get("", response_model=VisitorCountResponse)
async def get_visitors(db: AsyncSession = Depends(get_db)):
    """Get the site visit count without changing it."""
    count = await visitor_service.get_visitor_count(db)
    return VisitorCountResponse(count=count)


@router.post("", response_model=VisitorCountResponse)
@limiter.limit(RATE_LIMITS["visit"])
async def record_visit(request: Request, db: AsyncSession = Depends(get_db)):
    """Record one visit and return the updated count."""
    count = await visitor_service.increment_visitor_count(db)
    return VisitorCountResponse(count=count)
