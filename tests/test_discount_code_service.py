from datetime import datetime, timedelta, timezone
from uuid import uuid4

import httpx
import pytest
from sqlalchemy import func, select

from rewards_api.models.discount_code import DiscountCode, DiscountCodeType
from rewards_api.services.discount_codes import DiscountCodeError, DiscountCodeService, generate_six_digit_code
from rewards_api.services.retail import RetailApiClient, RetailApiError


NOW = datetime(2026, 5, 1, 9, 30, tzinfo=timezone.utc)


def test_generated_codes_are_six_digits() -> None:
    for _ in range(200):
        code = generate_six_digit_code()
        assert len(code) == 6
        assert code.isdigit()
        assert code[0] != "0"


@pytest.mark.asyncio
async def test_create_code_issues_locally_without_retail_client(session_factory, make_user) -> None:
    user = await make_user()

    async with session_factory() as session:
        service = DiscountCodeService(session, clock=lambda: NOW, code_generator=lambda: "654321")
        code = await service.create_discount_code(user.id, 500, DiscountCodeType.SWEETS_CREDITS_REWARD, 2)
        await session.commit()

    assert code.code == "654321"
    assert code.discount_amount == 500
    assert code.is_used is False
    assert code.expires_at == NOW + timedelta(days=60)


@pytest.mark.asyncio
async def test_create_code_skips_existing_codes(session_factory, make_user) -> None:
    user = await make_user()
    candidates = iter(["111111", "111111", "222222"])

    async with session_factory() as session:
        service = DiscountCodeService(session, clock=lambda: NOW, code_generator=lambda: next(candidates))
        first = await service.create_discount_code(user.id, 50, DiscountCodeType.FREE_TOPPING, 1)
        second = await service.create_discount_code(user.id, 50, DiscountCodeType.FREE_TOPPING, 1)
        await session.commit()

    assert (first.code, second.code) == ("111111", "222222")


@pytest.mark.asyncio
async def test_create_code_gives_up_after_repeated_collisions(session_factory, make_user) -> None:
    user = await make_user()

    async with session_factory() as session:
        service = DiscountCodeService(session, clock=lambda: NOW, code_generator=lambda: "999999")
        await service.create_discount_code(user.id, 50, DiscountCodeType.FREE_TOPPING, 1)
        with pytest.raises(DiscountCodeError):
            await service.create_discount_code(user.id, 50, DiscountCodeType.FREE_TOPPING, 1)


@pytest.mark.asyncio
@pytest.mark.parametrize("amount, months", [(0, 1), (-5, 1), (100, 0), (100, 4)])
async def test_create_code_validates_inputs(session_factory, amount: int, months: int) -> None:
    async with session_factory() as session:
        service = DiscountCodeService(session, clock=lambda: NOW)
        with pytest.raises(DiscountCodeError):
            await service.create_discount_code(uuid4(), amount, DiscountCodeType.FREE_TOPPING, months)


@pytest.mark.asyncio
async def test_create_code_registers_with_retail_api(session_factory, make_user) -> None:
    user = await make_user()
    promo_params: list[dict[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/loginSys"):
            return httpx.Response(200, json={"success": True, "message": "ok", "data": {"id": 3, "currentToken": "t"}})
        promo_params.append(dict(request.url.params))
        return httpx.Response(200, json={"success": True, "message": "ok"})

    retail = RetailApiClient(
        base_url="https://retail.test",
        username="u",
        password="p",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )

    async with session_factory() as session:
        service = DiscountCodeService(session, retail_client=retail, clock=lambda: NOW, code_generator=lambda: "135790")
        await service.create_discount_code(user.id, 50, DiscountCodeType.FREE_TOPPING, 1)
        await session.commit()

    assert promo_params == [
        {
            "addMode": "2",
            "codeNum": "135790",
            "number": "1",
            "month": "1",
            "type": "1",
            "discount": "0.5",
            "frpCode": "WEIXIN_NATIVE",
            "adminId": "3",
        }
    ]


@pytest.mark.asyncio
async def test_retail_failure_leaves_no_local_code(session_factory, make_user) -> None:
    user = await make_user()

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"success": False, "message": "down"})

    retail = RetailApiClient(
        base_url="https://retail.test",
        username="u",
        password="p",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )

    async with session_factory() as session:
        service = DiscountCodeService(session, retail_client=retail, clock=lambda: NOW)
        with pytest.raises(RetailApiError):
            await service.create_discount_code(user.id, 50, DiscountCodeType.FREE_TOPPING, 1)
        await session.rollback()

    async with session_factory() as session:
        total = (await session.execute(select(func.count()).select_from(DiscountCode))).scalar_one()
    assert total == 0


@pytest.mark.asyncio
async def test_list_codes_is_paginated_per_user(session_factory, make_user) -> None:
    owner, other = await make_user(), await make_user()
    codes = iter(["100001", "100002", "100003", "100004"])

    async with session_factory() as session:
        service = DiscountCodeService(session, clock=lambda: NOW, code_generator=lambda: next(codes))
        for _ in range(3):
            await service.create_discount_code(owner.id, 250, DiscountCodeType.SWEETS_CREDITS_REWARD, 1)
        await service.create_discount_code(other.id, 250, DiscountCodeType.SWEETS_CREDITS_REWARD, 1)
        await session.commit()

    async with session_factory() as session:
        service = DiscountCodeService(session)
        items, total = await service.list_user_discount_codes(owner.id, limit=2, offset=2)

    assert total == 3
    assert [item.code for item in items] == ["100003"]
