"""Provides the registry of Jacobian backends.

A Jacobian backend is the differentiation engine behind every
:class:`~ivpkit.derivative_bundle.DerivativeBundle`. Bundles never import a
backend directly. They receive one by name (or as an instance) and look it up
here, so alternative engines can be plugged in without touching the adapter.

Adding backends
---------------
New engines can be registered by calling ``register_backend`` (see example
below).

Examples:
    Resolving a built-in backend:

        >>> from ivpkit.jacobian.registry import resolve_backend
        >>> backend = resolve_backend("fd")
        >>> type(backend).__name__
        'FiniteDifferenceJacobian'

    Registering a new backend:

        >>> from ivpkit.jacobian.registry import register_backend
        >>> from mypackage.complex_step import ComplexStepJacobian  # doctest: +SKIP
        >>> register_backend(
        ...     name="complex-step",
        ...     cls=ComplexStepJacobian,
        ...     aliases=("cs",),
        ... )  # doctest: +SKIP

Notes:
    - Backend names are case/spacing/punctuation insensitive.
    - For available canonical backend names at runtime, call
      ``available_backends()``.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Any, Callable, Iterable, Mapping, Protocol, Type, runtime_checkable

import numpy as np

from ivpkit.jacobian.finite import FiniteDifferenceJacobian
from ivpkit.jacobian.forward import ForwardModeJacobian
from ivpkit.logger import ivpkit_logger

__all__ = [
    "DEFAULT_BACKEND",
    "JacobianBackend",
    "available_backends",
    "register_backend",
    "resolve_backend",
]

#: Backend used when no ``backend`` argument is given.
DEFAULT_BACKEND = "forward"


@runtime_checkable
class JacobianBackend(Protocol):
    """Protocol each Jacobian backend must satisfy.

    Two calling styles are supported, mirroring the two right-hand-side
    conventions. ``function(x) -> y`` is differentiated by :meth:`jacobian`
    and :meth:`jacobian_into`. ``function(y, x)``, which writes its result into
    ``y``, is differentiated by :meth:`mutating_jacobian` and
    :meth:`mutating_jacobian_into`. After a mutating call ``y`` holds
    ``function(x)``.
    """

    def jacobian(self, function: Callable[[Any], Any], x: Any) -> np.ndarray:
        """Returns a newly allocated Jacobian of ``function`` at ``x``."""
        ...

    def jacobian_into(self, out: np.ndarray, function: Callable[[Any], Any], x: Any) -> None:
        """Writes the Jacobian of ``function`` at ``x`` into ``out``."""
        ...

    def mutating_jacobian(
        self, function: Callable[[Any, Any], Any], y: np.ndarray, x: Any
    ) -> np.ndarray:
        """Returns a newly allocated Jacobian of a mutating ``function``."""
        ...

    def mutating_jacobian_into(
        self,
        out: np.ndarray,
        function: Callable[[Any, Any], Any],
        y: np.ndarray,
        x: Any,
    ) -> None:
        """Writes the Jacobian of a mutating ``function`` into ``out``."""
        ...


# These are the built-in backends available in the package by default.
_BACKEND_SPECS: list[tuple[str, Type[JacobianBackend], list[str]]] = [
    ("forward", ForwardModeJacobian, ["jax", "autodiff", "forwarddiff", "fwd"]),
    ("finite", FiniteDifferenceJacobian, ["finite-difference", "finite_difference", "fd"]),
]


def _norm(s: str) -> str:
    """Normalize a backend string for robust matching (case/spacing/punct insensitive).

    Args:
        s: Input string.

    Returns:
        Normalized string.
    """
    return re.sub(r"[^a-z0-9]+", "", s.lower())


@lru_cache(maxsize=1)
def _backend_maps() -> tuple[Mapping[str, Type[JacobianBackend]], tuple[str, ...]]:
    """Construct and cache lookup tables for Jacobian backends.

    The cache is cleared by ``register_backend``.

    Returns:
        A pair ``(backend_map, canonical_names)`` where ``backend_map`` maps
        normalized names and aliases to backend classes and
        ``canonical_names`` lists the sorted canonical backend names.
    """
    backend_map: dict[str, Type[JacobianBackend]] = {}
    canonical: set[str] = set()
    for name, cls, aliases in _BACKEND_SPECS:
        k = _norm(name)
        backend_map[k] = cls
        canonical.add(k)
        for a in aliases:
            backend_map[_norm(a)] = cls
    return backend_map, tuple(sorted(canonical))


def register_backend(
    name: str,
    cls: Type[JacobianBackend],
    *,
    aliases: Iterable[str] = (),
) -> None:
    """Register a new Jacobian backend.

    After registration the backend can be selected by name wherever a
    ``backend`` argument is accepted. Registering a name again makes the
    latest class win.

    Args:
        name: Canonical public name of the backend (e.g., "complex-step").
        cls: Backend class implementing the JacobianBackend protocol. It must
            be constructible without arguments.
        aliases: Additional accepted spellings.
    """
    _BACKEND_SPECS.append((name, cls, list(aliases)))
    _backend_maps.cache_clear()


def resolve_backend(backend: str | JacobianBackend | None = None) -> JacobianBackend:
    """Resolve a backend name, alias or instance to a backend instance.

    Args:
        backend: ``None`` for :data:`DEFAULT_BACKEND`, a registered name or
            alias, or an object already implementing the protocol.

    Returns:
        A backend instance.

    Raises:
        ValueError: If the name is not registered.
        TypeError: If ``backend`` is neither a string nor a backend object.
    """
    if backend is None:
        backend = DEFAULT_BACKEND
    if isinstance(backend, str):
        backend_map, canon = _backend_maps()
        try:
            cls = backend_map[_norm(backend)]
        except KeyError:
            opts = ", ".join(canon)
            raise ValueError(
                f"Unknown Jacobian backend '{backend}'. Choose one of {{{opts}}}."
            ) from None
        ivpkit_logger.debug("Resolved Jacobian backend %r to %s.", backend, cls.__name__)
        return cls()
    if isinstance(backend, JacobianBackend):
        return backend
    raise TypeError(
        f"backend must be a name or a JacobianBackend instance; got {type(backend).__name__}."
    )


def available_backends() -> list[str]:
    """List canonical backend names exposed by the registry.

    Returns:
        List of backend names.
    """
    _, canon = _backend_maps()
    return list(canon)
