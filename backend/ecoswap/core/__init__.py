"""
Core application modules: logging, metrics, resilience and request context.
"""
from .logging import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
