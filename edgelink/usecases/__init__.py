"""Use-case layer for orchestrating device workflows.

Each module coordinates domain objects and ports without performing transport
I/O directly, preserving MVVM + Hexagonal boundaries. Status polling and the
per-workflow completion handling live in ``status_poller`` and
``workflow_controllers``.
"""
