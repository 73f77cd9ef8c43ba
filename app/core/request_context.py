import contextvars
from contextlib import contextmanager
import uuid

request_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("request_id", default=None)
project_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("project_id", default=None)
node_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("node_id", default=None)


def set_request_id(request_id: str) -> contextvars.Token:
    """Store the current request ID in a context variable."""
    return request_id_var.set(request_id)


def reset_request_id(token: contextvars.Token) -> None:
    """Reset the request ID context variable to a previous state."""
    request_id_var.reset(token)


def get_request_id() -> str | None:
    """Retrieve the current request ID from the context."""
    return request_id_var.get()


def _normalize_id(value: uuid.UUID | str | None) -> str | None:
    if value is None:
        return None
    return str(value)


def get_project_id() -> str | None:
    """Retrieve the current project ID for logging."""
    return project_id_var.get()


def get_node_id() -> str | None:
    """Retrieve the current content node ID for logging."""
    return node_id_var.get()


@contextmanager
def log_context(
    project_id: uuid.UUID | str | None = None,
    node_id: uuid.UUID | str | None = None,
):
    """Temporarily scope project/node context for structured logs."""
    tokens: list[tuple[contextvars.ContextVar[str | None], contextvars.Token]] = []
    if project_id is not None:
        tokens.append((project_id_var, project_id_var.set(_normalize_id(project_id))))
    if node_id is not None:
        tokens.append((node_id_var, node_id_var.set(_normalize_id(node_id))))
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)
