"""
GitHub Copilot premium request usage.

Fetches the current billing period from the gh CLI and reports it as a
terminal panel, a JSON document, or an i3bar status element.
"""

__version__ = "1.0.0"
