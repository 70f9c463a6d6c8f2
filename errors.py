# errors.py
"""Error types shared by the dashboard backend."""


class DashboardError(Exception):
  """Base class for application-level errors."""


class ConfigurationError(DashboardError, RuntimeError):
  """Missing or invalid settings."""


class SeedingDisabledError(DashboardError):
  """The destructive seed route is not enabled in this deployment."""


class SeedAuthorizationError(DashboardError):
  """The seed request did not carry the configured token."""
