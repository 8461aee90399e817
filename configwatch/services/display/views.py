"""
Config Page Views

Builds the display view of a snapshot and renders it as HTML.
"""

from dataclasses import dataclass
from html import escape

from configwatch.common.exceptions import ParameterTypeError
from configwatch.common.logging_setup import get_service_logger
from configwatch.services.config.snapshot import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL_NAME,
    DEFAULT_TEMPERATURE,
    ConfigSnapshot,
)

logger = get_service_logger("display.views")

# Client-side reload period for the HTML page
AUTO_REFRESH_MS = 5000


@dataclass(frozen=True)
class ConfigView:
    """Values shown on the config page"""
    model_name: str
    temperature: float
    max_tokens: int

    @classmethod
    def from_snapshot(cls, snapshot: ConfigSnapshot) -> "ConfigView":
        """Take values from the snapshot, falling back to defaults"""
        temperature = DEFAULT_TEMPERATURE
        max_tokens = DEFAULT_MAX_TOKENS

        temperature_param = snapshot.param("temperature")
        try:
            if temperature_param is not None:
                temperature = temperature_param.as_float()
        except ParameterTypeError as e:
            logger.warning(f"Using default temperature: {e.message}")

        max_tokens_param = snapshot.param("maxTokens")
        try:
            if max_tokens_param is not None:
                max_tokens = max_tokens_param.as_int()
        except ParameterTypeError as e:
            logger.warning(f"Using default max tokens: {e.message}")

        return cls(
            model_name=snapshot.model_name or DEFAULT_MODEL_NAME,
            temperature=temperature,
            max_tokens=max_tokens,
        )


def _config_item(label: str, value: object) -> str:
    return f"""
        <div class="config-item">
            <div class="config-label">{escape(label)}:</div>
            <div class="config-value">{escape(str(value))}</div>
        </div>"""


def render_config_page(view: ConfigView, refresh_ms: int = AUTO_REFRESH_MS) -> str:
    """
    Render the config page.

    The page reloads itself every refresh_ms milliseconds.
    """
    items = "".join([
        _config_item("Model Name", view.model_name),
        _config_item("Temperature", view.temperature),
        _config_item("Max Tokens", view.max_tokens),
    ])

    return f"""<!DOCTYPE html>
<html>
<head>
    <title>Configuration State</title>
    <style>
        body {{
            font-family: Arial, sans-serif;
            max-width: 800px;
            margin: 0 auto;
            padding: 20px;
            background-color: #f5f5f5;
        }}
        .config-container {{
            background-color: white;
            padding: 20px;
            border-radius: 8px;
            box-shadow: 0 2px 4px rgba(0,0,0,0.1);
        }}
        .config-item {{
            margin-bottom: 15px;
            padding: 10px;
            border-bottom: 1px solid #eee;
        }}
        .config-label {{
            font-weight: bold;
            color: #333;
            margin-bottom: 5px;
        }}
        .config-value {{
            color: #666;
            font-family: monospace;
            background-color: #f8f9fa;
            padding: 5px;
            border-radius: 4px;
        }}
        h1 {{
            color: #2c3e50;
            margin-bottom: 20px;
        }}
        .last-updated {{
            color: #666;
            font-size: 0.9em;
            text-align: right;
            margin-top: 20px;
        }}
    </style>
</head>
<body>
    <div class="config-container">
        <h1>Configuration State</h1>{items}
        <div class="last-updated">
            Auto-refreshes every {refresh_ms // 1000} seconds
        </div>
        <script>
            setTimeout(function() {{
                window.location.reload();
            }}, {refresh_ms});
        </script>
    </div>
</body>
</html>
"""
