"""SpaceWx -- space-weather refresh, analytics and alerting service."""

__version__ = "0.1.0"
