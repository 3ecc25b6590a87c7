from datetime import datetime, timedelta, timezone

import pytest

from drillscope.analytics import (
    DrillDownNode,
    NestedChildrenProvider,
    ProportionalSplitProvider,
    QueryProvider,
)
from drillscope.fetch import ResilientFetcher
from drillscope.fetch.errors import NetworkError

pytestmark = [pytest.mark.unit, pytest.mark.analytics]

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)


def test_split_values_within_jitter_band():
    parent = DrillDownNode(id="p", name="P", value=1000)
    kids = ProportionalSplitProvider(clock=lambda: NOW).children(("P",), "store", parent)

    assert len(kids) == 5
    for kid, weight in zip(kids, (0.3, 0.25, 0.2, 0.15, 0.1)):
        assert 1000 * weight * 0.8 - 1 <= kid.value <= 1000 * weight * 1.2
        assert kid.value == int(kid.value)
    assert [k.id for k in kids] == [f"store_{i}" for i in range(5)]
    assert [k.timestamp for k in kids] == [NOW - timedelta(days=i) for i in range(5)]


def test_split_defaults_parent_value():
    kids = ProportionalSplitProvider().children(("x",), "day", None)
    assert 0.3 * 100 * 0.8 - 1 <= kids[0].value <= 0.3 * 100 * 1.2


def test_seed_changes_split():
    parent = DrillDownNode(id="p", name="P", value=10_000)
    a = ProportionalSplitProvider(seed=1).children(("P",), "day", parent)
    b = ProportionalSplitProvider(seed=2).children(("P",), "day", parent)
    assert [k.value for k in a] != [k.value for k in b]


def test_nested_children_without_fallback_is_empty():
    parent = DrillDownNode(id="p", name="P", value=1)
    assert NestedChildrenProvider().children(("P",), "day", parent) == []


def test_query_provider_retries_and_normalizes(sleeper):
    calls = []

    def query(path, level_name):
        calls.append((path, level_name))
        if len(calls) == 1:
            raise NetworkError("network blip")
        return [{"city": "Lyon", "sales": 7}]

    provider = QueryProvider(query, ResilientFetcher(sleeper=sleeper), data_key="sales", x_axis_key="city")
    kids = provider.children(["EU", "FR"], "city", None)

    assert calls == [(("EU", "FR"), "city"), (("EU", "FR"), "city")]
    assert [(k.id, k.name, k.value) for k in kids] == [("city_0", "Lyon", 7.0)]
