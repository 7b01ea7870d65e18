"""Contains exceptions raised when reconciling application configuration."""

from donder_release.exceptions import DonderReleaseError


class ConfigurationError(DonderReleaseError):
    """Raised when the configuration of a run is invalid or incomplete."""

    pass


class RequiredConfigurationElementError(ConfigurationError):
    """Raised when a required configuration element is missing."""

    def __init__(self, name: str, cli_name: str, env_name: str | None = None) -> None:
        """Initializes the exception with the name of the missing element."""
        hint = f"command line option {cli_name}" + (f", environment variable {env_name}" if env_name else "")
        super().__init__(f"Missing required configuration element: {name} ({hint})")
        self.name = name
        self.cli_name = cli_name
        self.env_name = env_name


class ConfigurationFileError(ConfigurationError):
    """Raised when the configuration file cannot be read or is invalid."""

    pass
