"""
Core library: shared infrastructure for the ENOVIA client packages.

Modules:
    errors   - Error classification and exception hierarchy
    logging  - Structured JSON logging with context propagation
    utils    - Serialization helpers

Design Principles:
    - No dependency on the passport or service packages
    - All modules are independently testable
    - Async-first where applicable
"""

from .types import ErrorCategory

__version__ = "0.1.0"

__all__ = [
    "ErrorCategory",
]
