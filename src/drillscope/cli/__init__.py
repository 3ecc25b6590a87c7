"""Command-line interface modules for the drill-down explorer.

This package contains core execution logic, making scripts/ optional and deletable.
"""

from drillscope.cli.run_explorer import run_explorer

__all__ = ['run_explorer']
