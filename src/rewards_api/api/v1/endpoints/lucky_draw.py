"""Member lucky-draw endpoints plus the operator chance grant."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rewards_api.api.dependencies.security import require_internal_api_key
from rewards_api.api.dependencies.services import get_lucky_draw_service
from rewards_api.api.dependencies.session import require_member_session
from rewards_api.api.responses import HANDLED_ERRORS, failure, failure_from_exception, success
from rewards_api.db.session import get_session
from rewards_api.models.user import User
from rewards_api.schemas.common import Page, PageParams
from rewards_api.schemas.lucky_draw import (
    AwardChancesRequest,
    LuckyDrawChancesResponse,
    LuckyDrawPrizeResponse,
    LuckyDrawRecordResponse,
    SpinResponse,
    WonPrize,
)
from rewards_api.services.lucky_draw import LuckyDrawService


router = APIRouter(prefix="/lucky-draw", tags=["Lucky Draw"])


def _chances_payload(entry) -> LuckyDrawChancesResponse:
    return LuckyDrawChancesResponse(
        total_awarded=entry.total_awarded,
        total_used=entry.total_used,
        remaining=entry.remaining,
    )


@router.get("/chances", summary="Current member's chance balance")
async def get_chances(
    user: User = Depends(require_member_session),
    service: LuckyDrawService = Depends(get_lucky_draw_service),
):
    try:
        entry = await service.get_user_chances(user.id)
    except HANDLED_ERRORS as exc:
        return failure_from_exception(exc)
    return success(_chances_payload(entry))


@router.get("/prizes", summary="Active prize catalog")
async def list_prizes(
    service: LuckyDrawService = Depends(get_lucky_draw_service),
):
    try:
        prizes = await service.list_prizes()
    except HANDLED_ERRORS as exc:
        return failure_from_exception(exc)
    return success([LuckyDrawPrizeResponse.model_validate(prize) for prize in prizes])


@router.get("/records", summary="Current member's draw history")
async def list_records(
    page: int | None = Query(None),
    per_page: int | None = Query(None),
    user: User = Depends(require_member_session),
    service: LuckyDrawService = Depends(get_lucky_draw_service),
):
    params = PageParams.from_query(page, per_page)
    try:
        records, total = await service.list_records(user.id, limit=params.per_page, offset=params.offset)
    except HANDLED_ERRORS as exc:
        return failure_from_exception(exc)
    return success(
        Page[LuckyDrawRecordResponse](
            items=[LuckyDrawRecordResponse.model_validate(record) for record in records],
            page=params.page,
            per_page=params.per_page,
            total=total,
            total_pages=params.total_pages(total),
        )
    )


@router.post("/spin", summary="Spend one chance and draw a prize")
async def spin(
    user: User = Depends(require_member_session),
    service: LuckyDrawService = Depends(get_lucky_draw_service),
):
    try:
        result = await service.spin(user.id)
    except HANDLED_ERRORS as exc:
        return failure_from_exception(exc)
    return success(
        SpinResponse(
            prize=WonPrize(
                id=result.prize.id,
                name=result.prize.name,
                value_cents=result.prize.value_cents,
            ),
            remaining_chances=result.remaining_chances,
        )
    )


@router.post(
    "/users/{user_id}/chances",
    dependencies=[Depends(require_internal_api_key)],
    summary="Grant chances to a member",
)
async def award_chances(
    user_id: UUID,
    payload: AwardChancesRequest,
    db: AsyncSession = Depends(get_session),
    service: LuckyDrawService = Depends(get_lucky_draw_service),
):
    user = (await db.execute(select(User.id).where(User.id == user_id))).scalar_one_or_none()
    if user is None:
        return failure(status.HTTP_404_NOT_FOUND, "NOT_FOUND", "User not found")

    try:
        entry = await service.award_chances(user_id, payload.count)
    except HANDLED_ERRORS as exc:
        return failure_from_exception(exc)
    return success(_chances_payload(entry))
