"""Core configuration, dependencies and instrumentation."""
