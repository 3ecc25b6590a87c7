import pytest
from pydantic import ValidationError

from drillscope.analytics.commands import DrillInto, NavigateToBreadcrumb, Reset

pytestmark = [pytest.mark.unit, pytest.mark.analytics]


def test_breadcrumb_path_coerced_to_tuple():
    assert NavigateToBreadcrumb(path=["a", "b"]).path == ("a", "b")
    assert NavigateToBreadcrumb(path="a").path == ("a",)
    assert NavigateToBreadcrumb().path == ()


def test_commands_are_frozen():
    command = DrillInto(node_id="x")
    with pytest.raises(ValidationError):
        command.node_id = "y"


def test_commands_reject_unknown_fields():
    with pytest.raises(ValidationError):
        Reset(level=0)
