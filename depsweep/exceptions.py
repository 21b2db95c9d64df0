"""Custom exceptions for depsweep."""


class DepsweepError(Exception):
    """Base exception for all depsweep errors."""


class ProjectParseError(DepsweepError):
    """Raised when a project-description document cannot be parsed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"cannot parse project file {path}: {reason}")


class ManifestParseError(DepsweepError):
    """Raised when a runtime dependency manifest is malformed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"cannot parse runtime manifest {path}: {reason}")


class ConfigError(DepsweepError):
    """Raised when an environment setting has an invalid value."""
