"""
Middlewares package initialization.

This package contains all middleware components:
- logging.py: Request/response logging
- error_handler.py: Centralized error handling
"""
from typing import List


def get_middlewares() -> List:
    """
    All middlewares in the correct order.
    
    Order matters! The first one wraps all the others, so logging sees the
    status produced by the error handler.
    """
    from .logging import logging_middleware
    from .error_handler import error_middleware
    
    return [logging_middleware, error_middleware]


__all__ = ['get_middlewares']
