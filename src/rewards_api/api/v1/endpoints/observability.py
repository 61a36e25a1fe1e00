"""Operator observability endpoints for the lucky draw."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from rewards_api.api.dependencies.security import require_internal_api_key
from rewards_api.observability.lucky_draw import get_lucky_draw_store


router = APIRouter(
    prefix="/observability",
    tags=["Observability"],
    dependencies=[Depends(require_internal_api_key)],
)


@router.get("/lucky-draw", summary="Lucky draw spin counters")
async def lucky_draw_snapshot() -> dict[str, object]:
    return get_lucky_draw_store().snapshot().as_dict()


def _format_metric(name: str, description: str, value: int | float, labels: dict[str, str] | None = None) -> list[str]:
    label_fragment = ""
    if labels:
        formatted = ",".join(f'{key}="{val}"' for key, val in sorted(labels.items()))
        label_fragment = f"{{{formatted}}}"
    return [
        f"# HELP {name} {description}",
        f"# TYPE {name} gauge",
        f"{name}{label_fragment} {value}",
    ]


@router.get(
    "/prometheus",
    summary="Prometheus-formatted observability metrics",
    response_class=PlainTextResponse,
)
async def prometheus_metrics() -> PlainTextResponse:
    snapshot = get_lucky_draw_store().snapshot()
    lines: list[str] = []

    lines.extend(
        _format_metric(
            "rewards_lucky_draw_spins_succeeded_total",
            "Lucky draw spins committed",
            snapshot.spins.get("succeeded", 0),
        )
    )
    lines.extend(
        _format_metric(
            "rewards_lucky_draw_spins_failed_total",
            "Lucky draw spins rolled back",
            snapshot.spins.get("failed", 0),
        )
    )
    lines.extend(
        _format_metric(
            "rewards_lucky_draw_stock_contention_total",
            "Stock reservations lost to concurrent spins",
            snapshot.contention.get("total", 0),
        )
    )
    lines.extend(
        _format_metric(
            "rewards_lucky_draw_unrouted_prizes_total",
            "Prizes won without a fulfillment route",
            snapshot.anomalies.get("unrouted_prizes", 0),
        )
    )

    for prize_name, value in sorted(snapshot.prizes.items()):
        lines.extend(
            _format_metric(
                "rewards_lucky_draw_prizes_won_total",
                "Lucky draw wins grouped by prize",
                value,
                labels={"prize": prize_name},
            )
        )
    for code, value in sorted(snapshot.failures.items()):
        lines.extend(
            _format_metric(
                "rewards_lucky_draw_failures_total",
                "Lucky draw failures grouped by error code",
                value,
                labels={"code": code},
            )
        )
    for kind, value in sorted(snapshot.fulfillment.items()):
        lines.extend(
            _format_metric(
                "rewards_lucky_draw_fulfillment_total",
                "Lucky draw fulfillments grouped by kind",
                value,
                labels={"kind": kind},
            )
        )

    return PlainTextResponse("\n".join(lines) + "\n")
