"""Log context management using contextvars for async-safe metadata."""
import contextvars
import logging
import uuid
from typing import Any, Dict, Optional


_correlation_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "correlation_id", default=None
)
_service_name_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "service_name", default=None
)
_operation_name_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "operation_name", default=None
)
_extra_context_var: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar(
    "extra_context", default={}
)
_logger = logging.getLogger(__name__)


def get_correlation_id() -> Optional[str]:
    """Get current correlation ID from context."""
    return _correlation_id_var.get(None)


def get_service_name() -> Optional[str]:
    """Get current service name from context."""
    return _service_name_var.get(None)


def get_operation_name() -> Optional[str]:
    """Get current operation name from context."""
    return _operation_name_var.get(None)


def set_service_name(service_name: str) -> None:
    _service_name_var.set(service_name)


def new_correlation_id() -> str:
    return uuid.uuid4().hex


def get_context() -> Dict[str, Any]:
    """Get all context values as a dictionary.

    Bound extra values (e.g. ``competition_id``) are merged in after the
    fixed keys.
    """
    context = {
        "correlation_id": get_correlation_id(),
        "service_name": get_service_name(),
        "operation_name": get_operation_name(),
    }
    context.update(_extra_context_var.get())
    return context


class log_context:
    """Context manager binding metadata to every log line in its scope.

    Works with both ``with`` and ``async with``. Values bound here are picked
    up by ``StructuredJSONFormatter``; leaving the scope restores the outer
    values, so nested contexts behave as expected inside asyncio tasks.

    Example:
        async with log_context(operation_name="analysis", competition_id="titanic"):
            logger.info("Starting analysis")
    """

    def __init__(
        self,
        correlation_id: Optional[str] = None,
        operation_name: Optional[str] = None,
        **extra_context: Any,
    ):
        self.correlation_id = correlation_id
        self.operation_name = operation_name
        self.extra_context = extra_context
        self._tokens: list = []

    def __enter__(self) -> "log_context":
        if self.correlation_id is not None:
            self._tokens.append((_correlation_id_var, _correlation_id_var.set(self.correlation_id)))
        if self.operation_name is not None:
            self._tokens.append((_operation_name_var, _operation_name_var.set(self.operation_name)))
        if self.extra_context:
            merged = {**_extra_context_var.get(), **self.extra_context}
            self._tokens.append((_extra_context_var, _extra_context_var.set(merged)))
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        while self._tokens:
            var, token = self._tokens.pop()
            var.reset(token)

    async def __aenter__(self) -> "log_context":
        return self.__enter__()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.__exit__(exc_type, exc_val, exc_tb)
