"""Context variables for structured logging."""

from contextvars import ContextVar
from typing import Dict, Optional

_trace_id: ContextVar[str] = ContextVar("trace_id", default="")
_tenant: ContextVar[str] = ContextVar("tenant", default="")
_operation: ContextVar[str] = ContextVar("operation", default="")


def set_log_context(
    trace_id: Optional[str] = None,
    tenant: Optional[str] = None,
    operation: Optional[str] = None,
) -> None:
    if trace_id is not None:
        _trace_id.set(trace_id)
    if tenant is not None:
        _tenant.set(tenant)
    if operation is not None:
        _operation.set(operation)


def get_log_context() -> Dict[str, str]:
    return {
        "trace_id": _trace_id.get(),
        "tenant": _tenant.get(),
        "operation": _operation.get(),
    }


def clear_log_context() -> None:
    _trace_id.set("")
    _tenant.set("")
    _operation.set("")
