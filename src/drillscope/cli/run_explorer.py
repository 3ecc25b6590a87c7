"""Core explorer execution logic.

This module contains the actual explorer runner, separated from argument parsing.
Scripts are thin wrappers; this is the real implementation.
"""

import json
import logging
import importlib.util
from pathlib import Path
from typing import Optional, Dict, Any

import pandas as pd

from drillscope.analytics import ChartController
from drillscope.fetch import DataQuery, DataRetriever
from drillscope.schemas import resolve_config, ParamConfig, UserConfig, CLIConfig


logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger with a single console handler."""
    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def load_user_config_dict(config_path: str) -> dict:
    """Load user config dict from Python file.

    Returns the raw dict before Pydantic validation.

    Parameters
    ----------
    config_path : str
        Path to user config Python file containing CONFIG dict.

    Returns
    -------
    dict
        Raw user configuration dictionary.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ValueError
        If no CONFIG dict found in file.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    spec = importlib.util.spec_from_file_location("config_module", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    for name in dir(module):
        if name.startswith('CONFIG'):
            obj = getattr(module, name)
            if isinstance(obj, dict):
                return obj

    raise ValueError(f"No CONFIG dict found in {path}")


def load_records(source: str) -> list:
    """Read aggregate records from a CSV or JSON file.

    Missing cells come back as None rather than NaN.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the suffix is neither ``.csv`` nor ``.json``.
    """
    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(f"Data source not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".csv":
        df = pd.read_csv(path)
    elif suffix == ".json":
        df = pd.read_json(path, orient="records", convert_dates=False)
    else:
        raise ValueError(f"Unsupported data source {path.name}; expected .csv or .json")

    df = df.astype(object).where(df.notna(), None)
    records = df.to_dict(orient="records")
    logger.info("Loaded %d records from %s", len(records), path)
    return records


def run_explorer(
    source: Optional[str] = None,
    user_config_path: Optional[str] = None,
    cli_args: Optional[Dict[str, Any]] = None,
    verbose: bool = False
) -> ChartController:
    """Load a dataset, follow a drill path and print the resulting view.

    This is the core explorer function. It:
    1. Loads and resolves configuration (Param < User < CLI)
    2. Configures logging from the resolved config
    3. Builds a ChartController and attaches it to a DataRetriever that
       reads ``source`` (or the config's SOURCE) with the cache and retry
       settings of the ``fetch`` section
    4. Drills along ``cli_args["drill_path"]``
    5. Prints level, breadcrumbs, summary and the displayed table

    Parameters
    ----------
    source : str, optional
        CSV or JSON file of root records. Overrides the config's source.
    user_config_path : str, optional
        Path to user config file (Python file with CONFIG dict).
    cli_args : dict, optional
        CLI argument overrides. Keys: chart_type, drill_path,
        value_range_percent, hide_outliers, max_data_points, log_level.
        All optional.
    verbose : bool, optional
        If True, enable DEBUG logging and print full resolved config.

    Returns
    -------
    ChartController
        The controller, left at the end of the drill path.

    Raises
    ------
    FileNotFoundError
        If the config or the data source does not exist.
    ValueError
        If configuration validation fails or no source is given.

    Examples
    --------
    Explore a CSV with defaults::

        run_explorer("data/revenue.csv")

    Drill two levels into a bar chart::

        run_explorer(
            "data/revenue.csv",
            "scripts/user_config.py",
            cli_args={"chart_type": "bar", "drill_path": ["North", "Region 2"]},
        )
    """
    param_cfg = ParamConfig()

    if user_config_path is not None:
        user_cfg = UserConfig.model_validate(load_user_config_dict(user_config_path))
    else:
        user_cfg = UserConfig()

    cli_args = dict(cli_args or {})
    if source is not None:
        cli_args["source"] = source
    if verbose and "log_level" not in cli_args:
        cli_args["log_level"] = "DEBUG"

    cli_dict = {k: v for k, v in cli_args.items() if v is not None}
    cli_cfg = CLIConfig.model_validate(cli_dict) if cli_dict else CLIConfig()

    config = resolve_config(param_cfg, user_cfg, cli_cfg)
    setup_logging(config.logging.level)

    if config.source is None:
        raise ValueError("No data source given (pass a file or set SOURCE in the user config)")

    name = Path(config.source).stem
    controller = ChartController.from_config(config, name=name)
    retriever = DataRetriever.from_config(lambda query: load_records(query.source), config.fetch, name=name)
    controller.attach(retriever)
    try:
        retriever.fetch(DataQuery(source=config.source))
        retriever.wait()
        retrieval = retriever.state
    finally:
        retriever.close()
    if retrieval.error is not None:
        raise retrieval.error

    for step in cli_cfg.drill_path or []:
        if not controller.drill_into(step):
            logger.warning("Cannot drill into %r at level %d (%s)",
                           step, controller.state.level, controller.current_level_name)
            break

    state = controller.state
    summary = controller.summary()

    print(f"\n{'='*60}")
    print("Drillscope Explorer")
    print('='*60)
    print(f"Source: {config.source}")
    print(f"Chart:  {config.chart.kind}")
    print(f"Level:  {state.level} ({controller.current_level_name})")
    print(f"Path:   {' > '.join(b.name for b in state.breadcrumbs)}")
    print(f"Points: {summary.count}  sum={summary.sum:.2f}  average={summary.average:.2f}")
    print('='*60)

    if verbose:
        print("\nFull Internal Configuration:")
        print(json.dumps(config.model_dump(mode="json"), indent=2))
        print('='*60)

    frame = controller.to_frame()
    print(frame[["id", "name", "value", "category"]].to_string(index=False))

    return controller
