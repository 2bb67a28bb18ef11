"""Extent authority.

Every call to ``open_extent`` produces a fresh extent: a token whose identity
is drawn from a process-local monotonic counter and which is live only while
the activation that produced it runs. Extents compare by object identity, so
an extent from one activation can never stand in for another, nested or
sequential.

Escapes are rejected in two places:
  - on return, in strict guard mode, the activation's result is scanned and
    any sub-value tagged with the closing extent raises ExtentEscapeError;
  - on dereference, in every mode, a closed extent raises ExtentEscapeError.

``open_scope`` produces the weaker, covariant token: scopes only prevent
escape, and scopes from nested activations may be used together.
"""

from __future__ import annotations

import itertools
import logging
import threading
from typing import Callable, TypeVar

from genz_core.config import DEFAULT_GENZ_CONFIG, GenzConfig
from genz_core.errors import ExtentEscapeError, ExtentMismatchError, ExtentThreadError

from genz.convert import collect_extents, extents_in, rebind

logger = logging.getLogger(__name__)

Z = TypeVar("Z")

_ROOT_IDENT = 0
_idents = itertools.count(_ROOT_IDENT + 1)
_idents_lock = threading.Lock()
_OPEN = object()


def _next_ident() -> int:
    with _idents_lock:
        return next(_idents)


class _Activation:
    __slots__ = ("_ident", "_owner", "_live")

    _kind = "activation"

    def __init__(self, ident: int, owner: int | None, *, _token=None):
        if _token is not _OPEN:
            raise TypeError(f"{self._kind}s are only created by open_{self._kind}")
        self._ident = ident
        self._owner = owner
        self._live = True

    @property
    def live(self) -> bool:
        return self._live

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        raise TypeError(f"{self._kind}s cannot be pickled")

    def __repr__(self) -> str:
        if self._ident == _ROOT_IDENT:
            return f"<{type(self).__name__} root>"
        state = "live" if self._live else "closed"
        return f"<{type(self).__name__} #{self._ident} {state}>"


class Extent(_Activation):
    """Invariant identity of one bounded activation."""

    __slots__ = ()

    _kind = "extent"


class Scope(_Activation):
    """Covariant activation token: prevents escape, allows unification."""

    __slots__ = ()

    _kind = "scope"


ROOT_EXTENT = Extent(_ROOT_IDENT, owner=None, _token=_OPEN)


@rebind.register(Extent)
def _rebind_extent(value: Extent, extent: Extent) -> Extent:
    return extent


@collect_extents.register(_Activation)
def _collect_activation(value: _Activation, out: list, seen: set) -> None:
    out.append(value)


def require_live(
    *tokens: _Activation,
    label: str = "require_live",
    cfg: GenzConfig = DEFAULT_GENZ_CONFIG,
) -> None:
    """Reject closed (escaped) extents/scopes and, optionally, foreign threads."""
    for token in tokens:
        if not isinstance(token, _Activation):
            raise TypeError(f"{label} expected Extent or Scope, got {type(token).__name__}")
        if token._owner is None:
            continue
        if not token._live:
            raise ExtentEscapeError(
                f"{token._kind} #{token._ident} used after its activation returned",
                label=label,
            )
        if cfg.thread_guard and token._owner != threading.get_ident():
            raise ExtentThreadError(
                f"{token._kind} #{token._ident} used outside its owning thread",
                label=label,
            )


def require_same_extent(
    *values,
    label: str = "require_same_extent",
    cfg: GenzConfig = DEFAULT_GENZ_CONFIG,
) -> Extent:
    """Return the single live extent shared by every value.

    This is the runtime form of a function generic over one extent: values
    (extents, markers, or any structure carrying them) drawn from two
    different activations raise ExtentMismatchError. Values that carry no
    extent at all are ignored; if none carries one, the root extent is
    returned.
    """
    shared = None
    for value in values:
        for token in extents_in(value):
            if not isinstance(token, Extent):
                continue
            require_live(token, label=label, cfg=cfg)
            if shared is None:
                shared = token
            elif token is not shared:
                raise ExtentMismatchError(
                    f"values from extents {shared!r} and {token!r} cannot be mixed",
                    label=label,
                )
    return ROOT_EXTENT if shared is None else shared


def _reject_escape(result, token: _Activation, label: str) -> None:
    for tag in extents_in(result):
        if tag is token:
            raise ExtentEscapeError(
                f"value bound to {token._kind} #{token._ident} escaped its activation",
                label=label,
            )


def _activate(token: _Activation, body, label: str, cfg: GenzConfig):
    logger.debug("open %s #%d", token._kind, token._ident)
    try:
        result = body(token)
        if cfg.strict:
            _reject_escape(result, token, label)
        return result
    finally:
        token._live = False
        logger.debug("close %s #%d", token._kind, token._ident)


def open_extent(
    body: Callable[[Extent], Z],
    *,
    cfg: GenzConfig = DEFAULT_GENZ_CONFIG,
) -> Z:
    """Invoke ``body`` with a fresh extent and return its result."""
    extent = Extent(_next_ident(), owner=threading.get_ident(), _token=_OPEN)
    return _activate(extent, body, "open_extent", cfg)


def open_scope(
    body: Callable[[Scope], Z],
    *,
    cfg: GenzConfig = DEFAULT_GENZ_CONFIG,
) -> Z:
    """Invoke ``body`` with a fresh covariant scope and return its result."""
    scope = Scope(_next_ident(), owner=threading.get_ident(), _token=_OPEN)
    return _activate(scope, body, "open_scope", cfg)


__all__ = [
    "Extent",
    "Scope",
    "ROOT_EXTENT",
    "open_extent",
    "open_scope",
    "require_live",
    "require_same_extent",
]
