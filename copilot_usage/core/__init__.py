"""
Core modules for copilot-usage.

This package contains the plan table, limit resolution, usage aggregation
and the error taxonomy shared by every output mode.
"""
