import pytest

from drillscope.analytics import ChartController, DrillInto, QueryProvider
from drillscope.fetch import DataQuery, DataRetriever, ResilientFetcher

pytestmark = [pytest.mark.unit, pytest.mark.analytics]


@pytest.fixture
def drill_config(make_config):
    return make_config(interactive=True, drill_down_levels=["region", "country", "city"])


def test_from_config_builds_root_view(internal_config, sample_records):
    controller = ChartController.from_config(internal_config, records=sample_records)

    assert controller.state.level == 0
    assert len(controller.processed_data) == 5
    assert controller.current_level_name == "Overview"
    assert controller.can_drill_down is False


def test_summary_over_processed_data(internal_config, sample_records):
    controller = ChartController.from_config(internal_config, records=sample_records)
    summary = controller.summary()

    assert summary.count == 5
    assert summary.sum == 475.0
    assert summary.average == 95.0


def test_summary_of_empty_view(internal_config):
    controller = ChartController.from_config(internal_config)
    assert tuple(controller.summary()) == (0, 0.0, 0.0)


def test_drill_and_breadcrumb_recompute(drill_config, sample_records):
    controller = ChartController.from_config(drill_config, records=sample_records)

    assert controller.drill_into("item_3")
    assert controller.state.path == ("West",)
    assert controller.current_level_name == "country"
    assert [n.category for n in controller.processed_data] == ["country"] * 5

    assert controller.navigate_to_breadcrumb([])
    assert len(controller.processed_data) == 5
    assert controller.processed_data[0].name == "North"


def test_failed_drill_does_not_notify(drill_config, sample_records):
    controller = ChartController.from_config(drill_config, records=sample_records)
    notified = []
    controller.subscribe(notified.append)

    assert controller.dispatch(DrillInto(node_id="nope")) is False
    assert notified == []

    controller.drill_into("item_0")
    assert notified == [controller]


def test_set_filters_recomputes(internal_config):
    records = [{"name": str(v), "value": v} for v in (1, 2, 3, 4, 100)]
    controller = ChartController.from_config(internal_config, records=records)

    controller.set_filters(show_outliers=False)
    assert [n.value for n in controller.processed_data] == [1, 2, 3, 4]

    controller.set_filters({"show_outliers": True, "value_range_percent": (50, 100)})
    assert [n.value for n in controller.processed_data] == [100]


def test_enable_filters_switch(make_config):
    config = make_config(show_outliers=False, enable_filters=False)
    records = [{"value": v} for v in (1, 2, 3, 4, 100)]
    controller = ChartController.from_config(config, records=records)
    assert len(controller.processed_data) == 5

    controller.enable_filters = True
    assert len(controller.processed_data) == 4


def test_virtualization_applied_after_filters(make_config):
    config = make_config(virtualize_data_points=True, max_data_points=10)
    controller = ChartController.from_config(config, records=[{"value": i} for i in range(95)])

    assert [n.value for n in controller.processed_data] == [0, 10, 20, 30, 40, 50, 60, 70, 80, 90]
    # sampled points, not the full level
    assert controller.summary().sum == 450.0


def test_render_payload(make_config, sample_records):
    config = make_config(chart_type="pie", colors=["#111", "#222"], interactive=True,
                         drill_down_levels=["region", "country"])
    controller = ChartController.from_config(config, records=sample_records)
    controller.drill_into("item_0")

    payload = controller.render_payload()
    assert payload["kind"] == "pie"
    assert payload["show_grid"] is False
    assert payload["series"]["slice_colors"] == ["#111", "#222", "#111", "#222", "#111"]
    assert payload["drill"]["path"] == ["North"]
    assert payload["drill"]["breadcrumbs"][0] == {"name": "Overview", "path": []}
    assert payload["drill"]["can_drill_down"] is False
    assert len(payload["data"]) == 5


def test_to_frame_carries_drill_context(drill_config, sample_records):
    controller = ChartController.from_config(drill_config, records=sample_records)
    controller.drill_into("item_1")

    frame = controller.to_frame()
    assert len(frame) == 5
    assert set(frame["path"]) == {"South"}
    assert set(frame["level_name"]) == {"country"}
    assert set(frame["level"]) == {1}


def test_to_frame_empty(internal_config):
    frame = ChartController.from_config(internal_config).to_frame()
    assert frame.empty
    assert {"id", "name", "value", "level", "path"} <= set(frame.columns)


def test_aggregate_uses_filter_settings(make_config, sample_records):
    config = make_config(group_by="month", aggregation="count")
    frame = ChartController.from_config(config, records=sample_records).aggregate()
    assert list(frame["value"]) == [2.0, 2.0, 1.0]


def test_attach_loads_retrieved_records(internal_config, sleeper):
    def source(query):
        return [{"name": "A", "value": 1}, {"name": "B", "value": 2}]

    retriever = DataRetriever(source, fetcher=ResilientFetcher(sleeper=sleeper))
    controller = ChartController.from_config(internal_config)
    detach = controller.attach(retriever)

    retriever.fetch(DataQuery(source="s")).join(5)
    assert [n.name for n in controller.processed_data] == ["A", "B"]

    detach()
    controller.load_root([])
    retriever.refresh()  # served from cache, controller no longer listening
    assert controller.processed_data == ()


class FlakyQuery:
    """Live query that raises ``errors`` first, then returns two cities."""

    def __init__(self, errors=()):
        self.errors = list(errors)
        self.calls = 0

    def __call__(self, path, level_name):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return [{"name": f"{path[-1]} A", "value": 1}, {"name": f"{path[-1]} B", "value": 2}]


def test_provider_failure_is_reported_not_raised(drill_config, sample_records):
    query = FlakyQuery(errors=[RuntimeError("HTTP 404 not found")])
    provider = QueryProvider(query, fetcher=ResilientFetcher(max_retries=1))
    controller = ChartController.from_config(drill_config, records=sample_records, provider=provider)
    notified = []
    controller.subscribe(notified.append)

    assert controller.drill_into("item_0") is False
    assert controller.state.level == 0
    assert len(controller.processed_data) == 5
    assert controller.loading is False
    assert isinstance(controller.error, RuntimeError)
    assert notified == [controller]
    assert controller.render_payload()["status"] == {"loading": False, "error": "HTTP 404 not found"}

    assert controller.drill_into("item_0") is True
    assert controller.error is None
    assert [n.name for n in controller.processed_data] == ["North A", "North B"]
    assert controller.render_payload()["status"]["error"] is None


def test_unknown_command_type_raises(internal_config):
    controller = ChartController.from_config(internal_config)
    with pytest.raises(TypeError):
        controller.dispatch("drill")
