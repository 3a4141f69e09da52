"""Use case: sales report for the staff console."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from resto.core.exceptions import StoreUnavailableError
from resto.domain.order_labels import status_color, status_label
from resto.domain.value_objects import OrderStatus
from resto.services.order_service import OrderLifecycleManager
from resto.services.stats import BusinessReport, build_business_report

logger = logging.getLogger(__name__)


@dataclass
class StatusRow:
    status: OrderStatus
    label: str
    color: str
    count: int


@dataclass
class BusinessReportResult:
    ok: bool
    error_key: str | None = None
    report: BusinessReport | None = None
    status_rows: list[StatusRow] = field(default_factory=list)
    retryable: bool = False


async def get_business_report(
    *,
    manager: OrderLifecycleManager,
    now: datetime | None = None,
    lang: str = "ms",
    top_limit: int = 10,
) -> BusinessReportResult:
    try:
        orders = await manager.list_all_orders()
    except StoreUnavailableError as e:
        logger.error(f"Business report failed, store unavailable: {e}")
        return BusinessReportResult(False, "store_unavailable", retryable=True)

    report = build_business_report(orders, now=now, top_limit=top_limit)
    rows = [
        StatusRow(
            status=status,
            label=status_label(status, lang),
            color=status_color(status),
            count=report.status_counts.get(status.value, 0),
        )
        for status in OrderStatus
    ]
    return BusinessReportResult(True, report=report, status_rows=rows)
