"""Exceptions raised by fastapi-password-recovery."""


class ConfigurationError(ValueError):
    """
    Raised when the recovery subsystem is misconfigured.

    This is the only error the package raises on purpose. It is raised while
    constructing the configuration, the rate limiter or the service, so a bad
    deployment fails at startup rather than on the first request.
    """
