from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Iterator

pass_id_var: ContextVar[str | None] = ContextVar("pass_id", default=None)
form_id_var: ContextVar[str | None] = ContextVar("form_id", default=None)
user_id_var: ContextVar[str | None] = ContextVar("user_id", default=None)

_CONTEXT_VARS: dict[str, ContextVar[str | None]] = {
    "pass_id": pass_id_var,
    "form_id": form_id_var,
    "user_id": user_id_var,
}


def set_context(**kwargs: str | None) -> dict[str, Token[str | None]]:
    tokens: dict[str, Token[str | None]] = {}
    for key, value in kwargs.items():
        var = _CONTEXT_VARS.get(key)
        if var is None:
            continue
        tokens[key] = var.set(value)
    return tokens


def reset_context(tokens: dict[str, Token[str | None]]) -> None:
    for key, token in tokens.items():
        var = _CONTEXT_VARS.get(key)
        if var is not None:
            var.reset(token)


@contextmanager
def log_context(
    pass_id: str | None = None,
    form_id: str | None = None,
    user_id: str | None = None,
) -> Iterator[None]:
    kwargs = {"pass_id": pass_id, "form_id": form_id, "user_id": user_id}
    # Only override what the caller supplied so nested item scopes keep the pass id.
    tokens = set_context(**{key: value for key, value in kwargs.items() if value is not None})
    try:
        yield
    finally:
        reset_context(tokens)


def get_log_context() -> dict[str, str]:
    values = {key: var.get() for key, var in _CONTEXT_VARS.items()}
    return {key: value for key, value in values.items() if value is not None}
