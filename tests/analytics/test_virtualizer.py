import pytest

from drillscope.analytics.nodes import normalize_records
from drillscope.analytics.virtualizer import sample_stride, virtualize
from drillscope.schemas.internal import InternalPerformanceConfig

pytestmark = [pytest.mark.unit, pytest.mark.analytics]


def perf(enabled=True, max_points=10):
    return InternalPerformanceConfig(
        virtualize_data_points=enabled, max_data_points=max_points, animation_duration_ms=0,
    )


def test_stride_sampling_95_to_10():
    nodes = normalize_records([{"value": i} for i in range(95)])
    result = virtualize(nodes, perf())

    assert [n.value for n in result] == [0, 10, 20, 30, 40, 50, 60, 70, 80, 90]
    assert all(r is nodes[int(r.value)] for r in result)


def test_inactive_when_disabled_or_small():
    nodes = normalize_records([{"value": i} for i in range(95)])
    assert len(virtualize(nodes, perf(enabled=False))) == 95
    assert len(virtualize(nodes[:10], perf())) == 10


def test_stride():
    assert sample_stride(95, 10) == 10
    assert sample_stride(101, 10) == 11
    assert sample_stride(5, 10) == 1
    with pytest.raises(ValueError):
        sample_stride(5, 0)
