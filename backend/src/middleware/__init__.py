"""Request processing middleware and exception handlers."""

from src.middleware.cors import register_cors
from src.middleware.error_handler import register_exception_handlers
from src.middleware.logging import logging_middleware

__all__ = ["logging_middleware", "register_cors", "register_exception_handlers"]
