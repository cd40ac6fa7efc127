"""Download-cache helpers and host diagnostics for an event-service client."""

__version__ = "0.1.0"