"""Utility layer errors."""


class UtilError(Exception):
    """Base utility error."""

    pass


class ConfigurationError(UtilError):
    """A required setting is missing or unusable.

    Attributes:
        setting: Environment variable name of the offending setting
    """

    def __init__(self, setting: str, message: str) -> None:
        self.setting = setting
        super().__init__(f"{setting}: {message}")


class DependencyInjectionError(UtilError):
    """No provider implementation matches the requested component."""

    pass
