"""Drill-down node model and record normalization.

Upstream records are loosely shaped dicts (``{name|category, value,
timestamp?, metadata?}`` or keyed by the chart's data/axis keys). They are
normalized once, at the edge, into immutable DrillDownNode objects.
"""

import math
from datetime import datetime
from typing import Any, Iterable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

__all__ = ['DrillDownNode', 'normalize_records', 'node_to_record', 'find_node']

_RESERVED = {"id", "name", "value", "category", "timestamp", "date", "metadata", "children"}


class DrillDownNode(BaseModel):
    """One aggregate at some drill level."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    value: float
    category: str = "default"
    timestamp: Optional[Union[datetime, str]] = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    children: Optional[tuple["DrillDownNode", ...]] = None


def _coerce_value(raw) -> float:
    """Numeric value or 0 for missing, blank, non-numeric and non-finite input."""
    if raw is None or isinstance(raw, bool):
        return 0.0
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return value


def _is_blank(v) -> bool:
    if v is None:
        return True
    if isinstance(v, float) and math.isnan(v):
        return True
    return isinstance(v, str) and not v.strip()


def _first(item: dict, *keys):
    for key in keys:
        v = item.get(key)
        if not _is_blank(v):
            return v
    return None


def normalize_records(records: Iterable, data_key: str = "value", x_axis_key: str = "name",
                      id_prefix: str = "item") -> list[DrillDownNode]:
    """Normalize raw records into DrillDownNodes.

    Defaults applied per record ``i`` (0-based):

    - ``id``: ``record["id"]`` or ``"<id_prefix>_<i>"``
    - ``name``: ``name``, then ``record[x_axis_key]``, then ``category``,
      then ``"Item <i+1>"``
    - ``value``: ``record[data_key]`` coerced to float, else 0
    - ``category``: ``"default"``
    - ``timestamp``: ``timestamp`` or ``date``
    - every other field goes into ``metadata``

    Nested ``children`` are normalized recursively. Nodes pass through
    unchanged.

    Parameters
    ----------
    records : iterable of dict or DrillDownNode
    data_key : str
        Field holding the numeric value.
    x_axis_key : str
        Field used as the label when ``name`` is missing.
    id_prefix : str
        Prefix for generated ids.

    Returns
    -------
    list of DrillDownNode
    """
    nodes = []
    for i, item in enumerate(records or []):
        if isinstance(item, DrillDownNode):
            nodes.append(item)
            continue

        item = dict(item)
        node_id = str(_first(item, "id") or f"{id_prefix}_{i}")
        name = _first(item, "name", x_axis_key, "category")
        category = _first(item, "category")

        metadata = dict(item.get("metadata") or {})
        for key, v in item.items():
            if key not in _RESERVED and key not in (data_key, x_axis_key):
                metadata[key] = v

        children = item.get("children")
        if children:
            children = tuple(normalize_records(children, data_key, x_axis_key, id_prefix=node_id))
        else:
            children = None

        nodes.append(DrillDownNode(
            id=node_id,
            name=str(name) if name is not None else f"Item {i + 1}",
            value=_coerce_value(item.get(data_key)),
            category=str(category) if category is not None else "default",
            timestamp=_first(item, "timestamp", "date"),
            metadata=metadata,
            children=children,
        ))
    return nodes


def node_to_record(node: DrillDownNode, data_key: str = "value", x_axis_key: str = "name") -> dict:
    """Flatten a node for renderers and exporters.

    The value and label are also exposed under the chart's ``data_key`` and
    ``x_axis_key`` so a renderer can address them by configured name.
    """
    record = dict(node.metadata)
    record.update({
        "id": node.id,
        "name": node.name,
        "value": node.value,
        "category": node.category,
        "timestamp": node.timestamp,
    })
    record[data_key] = node.value
    record[x_axis_key] = node.name
    return record


def find_node(nodes: Iterable[DrillDownNode], key: str) -> Optional[DrillDownNode]:
    """Find a node by id, falling back to name."""
    nodes = list(nodes)
    for node in nodes:
        if node.id == key:
            return node
    for node in nodes:
        if node.name == key:
            return node
    return None
