"""Sanitização centralizada de texto livre.

Todo texto vindo do usuário passa por aqui antes de ser persistido.
"""
import re
from typing import Any

_CONTROLE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_ESPACOS = re.compile(r"[ \t]+")


def sanitizar_input(value: Any) -> Any:
    """Return a sanitized version of user-provided free-text input.

    - str: removes control characters, collapses runs of spaces/tabs and
      trims leading/trailing whitespace. Line breaks are preserved.
    - None or non-str: returned as-is.
    """
    if isinstance(value, str):
        value = _CONTROLE.sub("", value)
        return _ESPACOS.sub(" ", value).strip()
    return value
