"""
Interactive project progress console.

Log in, pick a project/WBS/task, then record day-wise progress, manage plan
versions, confirm WBS nodes, allocate resources and administer rules and
master data against the backend.

Entry point: ``progress-console`` or ``python -m scripts.cli``.
"""

from scripts.cli.main import main

__all__ = ["main"]
