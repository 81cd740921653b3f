"""Calling conventions of right-hand-side functions.

A right-hand side comes in one of two shapes:

* functional, ``f(u, t) -> du``: returns a newly allocated derivative;
* mutating, ``f(du, u, t)``: writes the derivative into ``du``.

Callers should say which one they supply (see
:meth:`~ivpkit.derivative_bundle.DerivativeBundle.from_function` and
:meth:`~ivpkit.derivative_bundle.DerivativeBundle.from_inplace`). When they
do not, :func:`detect_convention` reads the signature of the callable without
ever calling it.
"""

from __future__ import annotations

import inspect
from enum import Enum
from typing import Any, Callable

from ivpkit.exceptions import ConstructionError
from ivpkit.logger import ivpkit_logger

__all__ = [
    "Convention",
    "as_convention",
    "detect_convention",
]


class Convention(str, Enum):
    """Calling convention of a right-hand side."""

    FUNCTIONAL = "functional"
    MUTATING = "mutating"


def as_convention(convention: Convention | str) -> Convention:
    """Converts a convention name to a :class:`Convention`.

    Raises:
        ConstructionError: If ``convention`` names no convention.
    """
    try:
        return Convention(convention)
    except ValueError:
        opts = ", ".join(c.value for c in Convention)
        raise ConstructionError(
            f"Unknown calling convention {convention!r}. Choose one of {{{opts}}}."
        ) from None


def _binds(signature: inspect.Signature, n_args: int) -> bool:
    """Checks whether ``n_args`` positional arguments bind to ``signature``."""
    try:
        signature.bind(*range(n_args))
    except TypeError:
        return False
    return True


def detect_convention(func: Callable[..., Any]) -> Convention:
    """Classifies a right-hand side by the number of positional arguments it accepts.

    Args:
        func: Candidate right-hand side.

    Returns:
        ``Convention.FUNCTIONAL`` if ``func`` accepts exactly two positional
        arguments, ``Convention.MUTATING`` if it accepts exactly three.

    Raises:
        ConstructionError: If ``func`` is not callable, exposes no signature,
            accepts neither two nor three arguments, or accepts both.
    """
    if not callable(func):
        raise ConstructionError(f"right-hand side must be callable; got {type(func).__name__}.")
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError) as exc:
        raise ConstructionError(
            f"cannot inspect the signature of {func!r}; pass convention='functional' "
            "or convention='mutating' explicitly."
        ) from exc

    two = _binds(signature, 2)
    three = _binds(signature, 3)
    if two and three:
        raise ConstructionError(
            f"ambiguous right-hand side {signature}: it accepts both f(u, t) and "
            "f(du, u, t); pass the convention explicitly."
        )
    if two:
        convention = Convention.FUNCTIONAL
    elif three:
        convention = Convention.MUTATING
    else:
        raise ConstructionError(
            f"right-hand side with signature {signature} matches neither "
            "f(u, t) nor f(du, u, t)."
        )
    ivpkit_logger.debug("Detected %s convention for %r.", convention.value, func)
    return convention
