from fastapi import APIRouter, Depends, Query
from typing import Optional
import logging
from pydantic import BaseModel

from app.database import get_db
from app.models.user import User
from app.routes.auth import get_current_admin_user
from app.services.report_service import report_service, ReportOverview
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/api/report", tags=["admin"])
logger = logging.getLogger(__name__)


class ReportEnvelope(BaseModel):
    success: bool = True
    report: ReportOverview


@router.get("/overview", response_model=ReportEnvelope)
async def get_overview(
    top: Optional[int] = Query(None, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Site-wide numbers for the admin dashboard.

    - **top**: How many of the most liked blogs to include
    """
    report = await report_service.overview(db, top=top)
    logger.debug(f"Report generated for admin {current_user.id}")
    return ReportEnvelope(report=report)
