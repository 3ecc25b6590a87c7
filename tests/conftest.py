"""Root-level pytest fixtures for the drillscope test suite.

Provides shared configuration fixtures following the Pydantic-based architecture,
plus deterministic time helpers for the retrieval layer.
All tests must use these fixtures instead of creating raw dict configs.
"""

import pytest

from drillscope.schemas import ParamConfig, UserConfig, resolve_config


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults.

    Use this as the base for all test configs. Override specific values
    using user_config or by creating custom UserConfig instances.
    """
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration (no overrides).

    Use this when tests don't care about specific config values and just
    need a valid InternalConfig to pass to constructors.

    Examples
    --------
    >>> def test_controller_init(internal_config):
    ...     controller = ChartController.from_config(internal_config)
    ...     assert controller.state.level == 0
    """
    return resolve_config(param_config, None, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Use this when you need to override specific values for a test.
    Returns a callable that accepts UserConfig-compatible kwargs.

    Examples
    --------
    >>> def test_bar_chart(make_config):
    ...     config = make_config(chart_type="bar", interactive=True)
    ...     assert config.chart.kind == "bar"
    """
    def _make(**user_overrides):
        """Create InternalConfig with user overrides."""
        if user_overrides:
            user = UserConfig(**user_overrides)
            return resolve_config(param_config, user, None)
        else:
            return resolve_config(param_config, None, None)

    return _make


# =============================================================================
# Time Fixtures
# =============================================================================

class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class RecordingSleeper:
    """Records requested waits instead of sleeping; optionally moves a clock."""

    def __init__(self, clock: FakeClock = None):
        self.calls = []
        self.clock = clock

    def __call__(self, seconds: float):
        self.calls.append(seconds)
        if self.clock is not None:
            self.clock.advance(seconds)


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def sleeper(fake_clock):
    return RecordingSleeper(fake_clock)


# =============================================================================
# Data Fixtures
# =============================================================================

@pytest.fixture
def sample_records():
    """Five root records in the loose upstream shape."""
    return [
        {"name": "North", "value": 120, "category": "region", "timestamp": "2024-01-05T00:00:00Z"},
        {"name": "South", "value": 80, "category": "region", "timestamp": "2024-01-20T00:00:00Z"},
        {"name": "East", "value": 45, "category": "region", "timestamp": "2024-02-02T00:00:00Z"},
        {"name": "West", "value": 200, "category": "region", "timestamp": "2024-02-14T00:00:00Z"},
        {"name": "Central", "value": 30, "category": "region", "date": "2024-03-01T00:00:00Z"},
    ]
