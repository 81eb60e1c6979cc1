"""
Utility modules for tablediff

Provides:
- logging: structured logging setup and formatters
- tracing: OpenTelemetry span helpers
"""

__all__ = ["logging", "tracing"]
