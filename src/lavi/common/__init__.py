"""
Common utilities for the Lavi library.

This module provides shared functionality used across all other modules:
- Custom exception hierarchy
- Logging configuration
- Actor/node ID mapping for community graphs
"""

from .exceptions import (
    LaviError,
    ValidationError,
    DataFormatError,
    ConfigurationError,
    DataIntegrityError,
    InvalidOperationError,
    validate_parameter,
    require_positive
)

from .id_mapper import IDMapper

from .logging_config import (
    setup_logging,
    get_logger,
    log_function_entry,
    log_performance_metric,
    LoggingTimer,
    JSONFormatter
)
