from __future__ import annotations

import re

_SECRET_VALUE_RE = re.compile(r"(?i)(token|key|secret)(\s*[=:]\s*)([^\s,;]+)")
_AUTH_SCHEME_RE = re.compile(r"(?i)((?:bearer|bot)\s+)([A-Za-z0-9._\-]{16,})")


def redact_string(s: str) -> str:
    redacted = _SECRET_VALUE_RE.sub(lambda m: f"{m.group(1)}{m.group(2)}***", s)
    redacted = _AUTH_SCHEME_RE.sub(lambda m: f"{m.group(1)}***", redacted)
    return redacted

