"""Navigation commands consumed by ``DrillDownNavigator.dispatch``."""

from typing import Union

from pydantic import BaseModel, ConfigDict, field_validator

__all__ = ['DrillInto', 'NavigateToBreadcrumb', 'Reset', 'NavigationCommand']


class _Command(BaseModel):
    model_config = ConfigDict(frozen=True, extra='forbid')


class DrillInto(_Command):
    """Drill into the node with this id (or name) at the current level."""
    node_id: str


class NavigateToBreadcrumb(_Command):
    """Go back to a prefix of the current path."""
    path: tuple[str, ...] = ()

    @field_validator("path", mode="before")
    @classmethod
    def coerce_path(cls, v):
        if isinstance(v, str):
            return (v,)
        return tuple(v)


class Reset(_Command):
    """Return to the overview."""


NavigationCommand = Union[DrillInto, NavigateToBreadcrumb, Reset]
