"""
Display Service - Config Page

Serves the current snapshot as JSON or as an auto-refreshing HTML page.
"""

from .server import DisplayServer, wants_json
from .views import ConfigView, render_config_page

__all__ = ["DisplayServer", "wants_json", "ConfigView", "render_config_page"]
