"""
Custom Exception Classes for configwatch

Hierarchical exception structure for error handling across services.
"""


class ConfigWatchError(Exception):
    """Base exception for all configwatch errors"""

    def __init__(self, message: str, recoverable: bool = True):
        self.message = message
        self.recoverable = recoverable
        super().__init__(message)


class ConfigError(ConfigWatchError):
    """Malformed configuration data or settings"""

    def __init__(self, message: str, recoverable: bool = True):
        super().__init__(f"Config Error: {message}", recoverable)


class FetchError(ConfigWatchError):
    """Provider could not deliver a configuration snapshot"""

    def __init__(self, message: str, config_key: str | None = None):
        self.config_key = config_key
        super().__init__(f"Fetch Error: {message}", recoverable=True)


class ParameterTypeError(ConfigWatchError):
    """Model parameter accessed as the wrong kind"""

    def __init__(self, name: str | None, expected: str, actual: str):
        self.name = name
        self.expected = expected
        self.actual = actual
        label = f"'{name}'" if name else "value"
        super().__init__(
            f"Parameter {label} is {actual}, not {expected}",
            recoverable=True,
        )


class StartupError(ConfigWatchError):
    """Required credentials or clients could not be constructed"""

    def __init__(self, message: str):
        super().__init__(f"Startup Error: {message}", recoverable=False)


class ServiceError(ConfigWatchError):
    """Service lifecycle errors"""

    def __init__(self, message: str, service_name: str, recoverable: bool = True):
        self.service_name = service_name
        super().__init__(f"Service [{service_name}]: {message}", recoverable)
