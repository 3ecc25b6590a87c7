import importlib
import json
import logging

import pytest

from drillscope.cli.run_explorer import load_records, load_user_config_dict, run_explorer, setup_logging
from drillscope.fetch.errors import NetworkError

explorer_module = importlib.import_module("drillscope.cli.run_explorer")

pytestmark = pytest.mark.unit

CSV = """region,revenue,date
North,1200,2024-01-15
South,950,2024-01-20
East,780,2024-02-03
West,
"""


@pytest.fixture
def csv_source(tmp_path):
    path = tmp_path / "revenue.csv"
    path.write_text(CSV)
    return path


@pytest.fixture
def user_config_file(tmp_path, csv_source):
    path = tmp_path / "user_config.py"
    path.write_text(
        "CONFIG = {\n"
        f"    'SOURCE': {str(csv_source)!r},\n"
        "    'CHART_TYPE': 'bar',\n"
        "    'DATA_KEY': 'revenue',\n"
        "    'X_AXIS_KEY': 'region',\n"
        "    'INTERACTIVE': True,\n"
        "    'DRILL_DOWN_LEVELS': ['region', 'district'],\n"
        "}\n"
    )
    return path


def test_load_records_csv_uses_none_for_missing(csv_source):
    records = load_records(str(csv_source))

    assert len(records) == 4
    assert records[0]["region"] == "North"
    assert records[3]["revenue"] is None
    assert records[3]["date"] is None


def test_load_records_json(tmp_path):
    path = tmp_path / "rows.json"
    path.write_text(json.dumps([{"name": "A", "value": 1}, {"name": "B", "value": 2}]))

    records = load_records(str(path))
    assert [r["name"] for r in records] == ["A", "B"]


def test_load_records_rejects_unknown_suffix(tmp_path):
    path = tmp_path / "rows.parquet"
    path.write_text("")
    with pytest.raises(ValueError, match="Unsupported"):
        load_records(str(path))


def test_load_records_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_records(str(tmp_path / "nope.csv"))


def test_load_user_config_dict(user_config_file):
    config = load_user_config_dict(str(user_config_file))
    assert config["CHART_TYPE"] == "bar"


def test_load_user_config_without_config_dict(tmp_path):
    path = tmp_path / "empty.py"
    path.write_text("X = 1\n")
    with pytest.raises(ValueError, match="No CONFIG"):
        load_user_config_dict(str(path))


def test_run_explorer_follows_drill_path(user_config_file, capsys):
    controller = run_explorer(None, str(user_config_file), cli_args={"drill_path": ["North"]})

    assert controller.state.path == ("North",)
    assert controller.current_level_name == "district"
    out = capsys.readouterr().out
    assert "Chart:  bar" in out
    assert "Overview > North" in out
    assert "District 1" in out


def test_run_explorer_stops_at_unknown_step(user_config_file, capsys):
    controller = run_explorer(None, str(user_config_file), cli_args={"drill_path": ["Atlantis", "x"]})
    assert controller.state.level == 0


def test_run_explorer_cli_source_and_filters(tmp_path, capsys):
    path = tmp_path / "rows.json"
    path.write_text(json.dumps([{"name": n, "value": v} for n, v in zip("ABCDE", (0, 25, 50, 75, 100))]))

    controller = run_explorer(
        str(path),
        cli_args={"chart_type": "line", "value_range_percent": (50, 100)},
    )

    assert [n.name for n in controller.processed_data] == ["C", "D", "E"]
    assert controller.summary().sum == 225.0


def test_run_explorer_without_source(capsys):
    with pytest.raises(ValueError, match="No data source"):
        run_explorer()


def test_setup_logging_sets_root_level():
    setup_logging("WARNING")
    root = logging.getLogger()
    assert root.level == logging.WARNING
    assert len(root.handlers) == 1
    setup_logging("INFO")


def test_run_explorer_retries_transient_read_errors(tmp_path, csv_source, monkeypatch, capsys):
    config = tmp_path / "retry_config.py"
    config.write_text("CONFIG = {'MAX_RETRIES': 3, 'fetch': {'base_delay_ms': 0, 'max_delay_ms': 0}}\n")

    calls = []
    real_load = explorer_module.load_records

    def flaky_load(source):
        calls.append(source)
        if len(calls) == 1:
            raise NetworkError("network unreachable")
        return real_load(source)

    monkeypatch.setattr(explorer_module, "load_records", flaky_load)
    controller = run_explorer(str(csv_source), str(config))

    assert calls == [str(csv_source)] * 2
    assert len(controller.processed_data) == 4


def test_run_explorer_missing_file_raises(tmp_path, capsys):
    with pytest.raises(FileNotFoundError):
        run_explorer(str(tmp_path / "absent.csv"))
