"""Billing Context Management.

Binds the billing run and the acting operator to every log entry
emitted inside the context, using contextvars.
"""

import uuid
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


_billing_run_id_var: ContextVar[str] = ContextVar("billing_run_id", default="")
_operator_id_var: ContextVar[str] = ContextVar("operator_id", default="")
_extra_context_var: ContextVar[dict] = ContextVar("extra_context", default={})


def generate_run_id() -> str:
    """Generate a unique billing run ID using UUID4."""
    return str(uuid.uuid4())


def get_billing_run_id() -> str:
    return _billing_run_id_var.get()


def get_operator_id() -> str:
    return _operator_id_var.get()


def get_context_dict() -> dict[str, Any]:
    """Get all context variables as a dictionary for log binding."""
    ctx = {}
    run_id = _billing_run_id_var.get()
    if run_id:
        ctx["billing_run_id"] = run_id
    operator_id = _operator_id_var.get()
    if operator_id:
        ctx["operator_id"] = operator_id
    extra = _extra_context_var.get()
    if extra:
        ctx.update(extra)
    return ctx


@dataclass
class BillingContext:
    """Context manager for billing-run scoped logging context.

    Example:
        with BillingContext(operator_id="admin-7"):
            service.calculate(...)  # log lines carry billing_run_id, operator_id
    """

    billing_run_id: str = ""
    operator_id: str = ""
    extra: dict[str, Any] = field(default_factory=dict)
    started_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    _tokens: list = field(default_factory=list, repr=False)

    def __post_init__(self):
        if not self.billing_run_id:
            self.billing_run_id = generate_run_id()

    def __enter__(self) -> "BillingContext":
        self._tokens = [
            (_billing_run_id_var, _billing_run_id_var.set(self.billing_run_id)),
            (_operator_id_var, _operator_id_var.set(self.operator_id)),
            (_extra_context_var, _extra_context_var.set(self.extra.copy())),
        ]
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        for var, token in reversed(self._tokens):
            var.reset(token)
        self._tokens.clear()

    @property
    def elapsed_ms(self) -> float:
        """Milliseconds since context was created."""
        delta = datetime.now(timezone.utc) - self.started_at
        return delta.total_seconds() * 1000

    def bind(self, **kwargs: Any) -> None:
        """Add extra key-value pairs to the context."""
        current = _extra_context_var.get()
        _extra_context_var.set({**current, **kwargs})
        self.extra.update(kwargs)
