import pytest

from drillscope.analytics.nodes import DrillDownNode, find_node, node_to_record, normalize_records

pytestmark = [pytest.mark.unit, pytest.mark.analytics]


def test_defaults_applied_in_order():
    nodes = normalize_records([
        {"name": "Jan", "value": 10},
        {"month": "Feb", "value": "12.5"},
        {"category": "misc"},
        {},
    ], x_axis_key="month")

    assert [n.id for n in nodes] == ["item_0", "item_1", "item_2", "item_3"]
    assert [n.name for n in nodes] == ["Jan", "Feb", "misc", "Item 4"]
    assert [n.value for n in nodes] == [10.0, 12.5, 0.0, 0.0]
    assert [n.category for n in nodes] == ["default", "default", "misc", "default"]


def test_custom_data_key_and_extra_fields_to_metadata():
    nodes = normalize_records(
        [{"region": "North", "revenue": 99, "date": "2024-01-01", "owner": "ops"}],
        data_key="revenue", x_axis_key="region",
    )
    node = nodes[0]

    assert node.name == "North"
    assert node.value == 99.0
    assert node.timestamp == "2024-01-01"
    assert node.metadata == {"owner": "ops"}


def test_non_numeric_and_nan_values_become_zero():
    nodes = normalize_records([{"value": "n/a"}, {"value": float("nan")}, {"value": None}])
    assert [n.value for n in nodes] == [0.0, 0.0, 0.0]


def test_infinite_values_become_zero():
    nodes = normalize_records([{"value": float("inf")}, {"value": "-inf"}, {"value": 7}])
    assert [n.value for n in nodes] == [0.0, 0.0, 7.0]


def test_explicit_id_kept_and_children_normalized():
    nodes = normalize_records([
        {"id": "eu", "name": "Europe", "value": 5, "children": [{"name": "France", "value": 3}]},
    ])
    parent = nodes[0]

    assert parent.id == "eu"
    assert parent.children[0].id == "eu_0"
    assert parent.children[0].name == "France"


def test_nodes_pass_through_untouched():
    node = DrillDownNode(id="x", name="X", value=1)
    assert normalize_records([node])[0] is node


def test_node_to_record_exposes_configured_keys():
    node = DrillDownNode(id="x", name="North", value=4, metadata={"owner": "ops"})
    record = node_to_record(node, data_key="revenue", x_axis_key="region")

    assert record["revenue"] == 4
    assert record["region"] == "North"
    assert record["owner"] == "ops"
    assert record["id"] == "x"


def test_find_node_by_id_then_name():
    nodes = normalize_records([{"name": "A"}, {"name": "item_0"}])
    assert find_node(nodes, "item_0") is nodes[0]
    assert find_node(nodes, "A") is nodes[0]
    assert find_node(nodes, "zzz") is None
