"""Interactive terminal browser for ccexp.

Provides the Live view shown when `ccexp` runs without a subcommand.
"""

from __future__ import annotations

from .browser import run_browser
from .session import BrowserSession

__all__ = ["BrowserSession", "run_browser"]
