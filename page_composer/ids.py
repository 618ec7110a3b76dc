"""Identifier and anchor generation for newly created nodes."""

from __future__ import annotations

import secrets
import string
import time
import typing as typ

from ._constants import ID_PREFIX

_ALPHABET = string.digits + string.ascii_lowercase

IdFactory = typ.Callable[[], str]
AnchorFactory = typ.Callable[[str], str]


def _token(length: int) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def generate_id() -> str:
    """Return a new globally unique node id such as ``pb-1718000000000-k3j9x0a1b``."""
    return f"{ID_PREFIX}-{int(time.time() * 1000)}-{_token(9)}"


def build_anchor(prefix: str) -> str:
    """Return a short deep-link anchor, e.g. ``build_anchor("row") -> "row-4f0x2c"``."""
    return f"{prefix}-{_token(6)}"


class SequentialIds:
    """Deterministic id factory for tests and reproducible fixtures.

    >>> ids = SequentialIds("node")
    >>> ids(), ids()
    ('node-1', 'node-2')
    """

    def __init__(self, prefix: str = ID_PREFIX) -> None:
        self.prefix = prefix
        self._counter = 0

    def __call__(self) -> str:
        self._counter += 1
        return f"{self.prefix}-{self._counter}"


__all__ = [
    "AnchorFactory",
    "IdFactory",
    "SequentialIds",
    "build_anchor",
    "generate_id",
]
