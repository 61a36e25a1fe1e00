from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from rewards_api.api.dependencies.services import get_discount_code_service
from rewards_api.api.dependencies.session import require_member_session
from rewards_api.api.responses import HANDLED_ERRORS, failure_from_exception, success
from rewards_api.models.user import User
from rewards_api.schemas.common import Page, PageParams
from rewards_api.schemas.discount_code import DiscountCodeResponse
from rewards_api.services.discount_codes import DiscountCodeService


router = APIRouter(prefix="/discount-codes", tags=["Discount Codes"])


@router.get("", summary="Current member's discount codes")
async def list_discount_codes(
    page: int | None = Query(None),
    per_page: int | None = Query(None),
    user: User = Depends(require_member_session),
    service: DiscountCodeService = Depends(get_discount_code_service),
):
    params = PageParams.from_query(page, per_page)
    try:
        codes, total = await service.list_user_discount_codes(
            user.id,
            limit=params.per_page,
            offset=params.offset,
        )
    except HANDLED_ERRORS as exc:
        return failure_from_exception(exc)
    return success(
        Page[DiscountCodeResponse](
            items=[DiscountCodeResponse.model_validate(code) for code in codes],
            page=params.page,
            per_page=params.per_page,
            total=total,
            total_pages=params.total_pages(total),
        )
    )
