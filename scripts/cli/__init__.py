"""
Heal-x CLI -- operate the financial engine from a terminal.

Refresh a snapshot, create/list/delete/activate budget plans, review
budget vs actual and export reports.

Entry point: python -m scripts.cli (or the ``healx`` console script)
"""

from scripts.cli.main import main

__all__ = ["main"]
