from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from threading import Lock
from typing import Dict


@dataclass
class LuckyDrawSnapshot:
    spins: Dict[str, int]
    prizes: Dict[str, int]
    failures: Dict[str, int]
    contention: Dict[str, int]
    fulfillment: Dict[str, int]
    anomalies: Dict[str, int]

    def as_dict(self) -> Dict[str, object]:
        return {
            "spins": dict(self.spins),
            "prizes": dict(self.prizes),
            "failures": dict(self.failures),
            "contention": dict(self.contention),
            "fulfillment": dict(self.fulfillment),
            "anomalies": dict(self.anomalies),
        }


class LuckyDrawObservabilityStore:
    """Collect lucky-draw spin telemetry for dashboards and alerting."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._spins: Dict[str, int] = defaultdict(int)
        self._prizes: Dict[str, int] = defaultdict(int)
        self._failures: Dict[str, int] = defaultdict(int)
        self._contention: Dict[str, int] = defaultdict(int)
        self._fulfillment: Dict[str, int] = defaultdict(int)
        self._anomalies: Dict[str, int] = defaultdict(int)

    def record_spin(self, prize_name: str) -> None:
        with self._lock:
            self._spins["succeeded"] += 1
            self._prizes[prize_name] += 1

    def record_failure(self, code: str) -> None:
        with self._lock:
            self._spins["failed"] += 1
            self._failures[code] += 1

    def record_stock_contention(self, prize_name: str) -> None:
        with self._lock:
            self._contention["total"] += 1
            self._contention[f"prize:{prize_name}"] += 1

    def record_fulfillment(self, kind: str) -> None:
        with self._lock:
            self._fulfillment[kind] += 1

    def record_unrouted_prize(self, prize_name: str) -> None:
        with self._lock:
            self._anomalies["unrouted_prizes"] += 1
            self._anomalies[f"prize:{prize_name}"] += 1

    def snapshot(self) -> LuckyDrawSnapshot:
        with self._lock:
            return LuckyDrawSnapshot(
                spins=dict(self._spins),
                prizes=dict(self._prizes),
                failures=dict(self._failures),
                contention=dict(self._contention),
                fulfillment=dict(self._fulfillment),
                anomalies=dict(self._anomalies),
            )

    def reset(self) -> None:
        with self._lock:
            self._spins.clear()
            self._prizes.clear()
            self._failures.clear()
            self._contention.clear()
            self._fulfillment.clear()
            self._anomalies.clear()


_STORE = LuckyDrawObservabilityStore()


def get_lucky_draw_store() -> LuckyDrawObservabilityStore:
    return _STORE


__all__ = ["get_lucky_draw_store", "LuckyDrawObservabilityStore", "LuckyDrawSnapshot"]
