"""Utility layer errors."""


class UtilError(Exception):
    """Base utility error."""

    pass


class ConfigurationError(UtilError):
    """A setting holds a value the sync layer cannot work with.

    Attributes:
        setting: Environment-style name of the offending setting
    """

    def __init__(self, setting: str, reason: str):
        self.setting = setting
        super().__init__(f"Invalid {setting}: {reason}")


class DependencyInjectionError(UtilError):
    """No provider implementation matches the requested component."""

    def __init__(self, component: str, kind: str):
        self.component = component
        self.kind = kind
        super().__init__(f"No {kind} implementation for {component}")
