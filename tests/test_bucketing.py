from __future__ import annotations

from datetime import date

import pytest

from seguimiento_ots.models import ANTI, ARCHIVED, INCO, WorkOrder
from seguimiento_ots.services.bucketing import (
    dashboard_summary,
    delayed,
    is_delayed,
    partition,
    sort_by_progress,
)


def _order(ot, location=INCO, progress=0, **dates) -> WorkOrder:
    return WorkOrder(
        ot=ot,
        location=location,
        progress=progress,
        dates={k: date.fromisoformat(v) for k, v in dates.items()},
    )


def test_partition_is_total_and_order_preserving() -> None:
    orders = [
        _order("A", INCO),
        _order("B", ANTI),
        _order("C", INCO),
        _order("D", ARCHIVED),
        _order("E", ANTI),
    ]
    buckets = partition(orders)

    assert [o.ot for o in buckets.inco] == ["A", "C"]
    assert [o.ot for o in buckets.anti] == ["B", "E"]
    assert [o.ot for o in buckets.archived] == ["D"]
    assert buckets.total == len(orders)


def test_partition_rejects_unknown_location() -> None:
    with pytest.raises(ValueError, match="localização desconhecida"):
        partition([_order("X", "LIMBO")])


def test_delayed_example_from_dates() -> None:
    order = _order("OT-1", Corte="2024-01-01", Armado="2024-01-05")
    assert is_delayed(order, today=date(2024, 3, 1))


def test_delayed_uses_earliest_date_not_first_key() -> None:
    # la primera clave es la más reciente
    order = _order("OT-2", Armado="2024-02-25", Corte="2024-01-10")
    assert is_delayed(order, today=date(2024, 2, 26))


def test_delayed_threshold_is_strictly_more_than_30_days() -> None:
    order = _order("OT-3", Corte="2024-01-01")
    assert not is_delayed(order, today=date(2024, 1, 31))
    assert is_delayed(order, today=date(2024, 2, 1))


def test_orders_without_dates_are_never_delayed() -> None:
    assert delayed([_order("OT-4")], today=date(2030, 1, 1)) == []


def test_delayed_returns_subset_in_input_order() -> None:
    today = date(2024, 3, 1)
    orders = [
        _order("old", Corte="2024-01-01"),
        _order("new", Corte="2024-02-20"),
        _order("empty"),
        _order("older", Corte="2023-12-01"),
    ]
    assert [o.ot for o in delayed(orders, today)] == ["old", "older"]


def test_sort_by_progress_is_stable_and_descending() -> None:
    orders = [
        _order("a", progress=30),
        _order("b", progress=85),
        _order("c", progress=30),
        _order("d", progress=0),
        _order("e", progress=85),
    ]
    assert [o.ot for o in sort_by_progress(orders)] == ["b", "e", "a", "c", "d"]


def test_dashboard_summary_counts_and_averages() -> None:
    buckets = partition(
        [
            _order("i1", INCO, Corte="2024-01-01"),
            _order("i2", INCO),
            _order("a1", ANTI, Corte="2024-02-20", Anticorr="2024-02-25"),
            _order(
                "z1",
                ARCHIVED,
                Corte="2024-01-01",
                Anticorr="2024-01-21",
                Despacho="2024-02-10",
            ),
            _order(
                "z2",
                ARCHIVED,
                Corte="2024-01-01",
                Anticorr="2024-01-11",
                Despacho="2024-01-21",
            ),
        ]
    )
    summary = dashboard_summary(buckets, today=date(2024, 3, 1))

    assert summary["total"] == 5
    assert summary["in_progress"] == 3
    assert summary["completed"] == 2
    assert summary["by_location"] == {INCO: 2, ANTI: 1, ARCHIVED: 2}
    # los despachados no cuentan como atrasados
    assert summary["delayed"] == 1
    assert summary["delayed_orders"] == ["i1"]
    assert summary["avg_days"] == {"total": 30.0, INCO: 15.0, ANTI: 15.0}


def test_dashboard_summary_without_archived_orders() -> None:
    summary = dashboard_summary(partition([_order("i1")]), today=date(2024, 3, 1))
    assert summary["avg_days"] == {"total": None, INCO: None, ANTI: None}
    assert summary["delayed"] == 0
    assert summary["delayed_orders"] == []
