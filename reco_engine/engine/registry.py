"""
Scoring-unit registry: maps configuration names to unit factories.

``engine.units`` in ``config/default.toml`` lists unit names in dispatch
order; ``build_units()`` turns that list into unit instances.

Register a unit class (or any factory callable) with the decorator::

    @register_unit("friends_in_common")
    class FriendsInCommon(BaseScoringUnit):
        def __init__(self, graph: PeopleGraph) -> None: ...

Dependencies are passed to ``build_units`` as keyword arguments; each factory
receives only the keywords its signature declares, so units with different
needs can share one call.
"""

from __future__ import annotations

import inspect
from typing import Any, Callable, Iterable

from reco_engine.engine.base import ScoringUnit

UnitFactory = Callable[..., ScoringUnit]

_REGISTRY: dict[str, UnitFactory] = {}


def register_unit(name: str) -> Callable[[UnitFactory], UnitFactory]:
    """Decorator registering ``factory`` under ``name``.

    Raises:
        ValueError: If ``name`` is empty or already registered to another factory.
    """
    if not name:
        raise ValueError("Unit name must be a non-empty string.")

    def decorator(factory: UnitFactory) -> UnitFactory:
        existing = _REGISTRY.get(name)
        if existing is not None and existing is not factory:
            raise ValueError(f"Scoring unit '{name}' is already registered to {existing!r}.")
        _REGISTRY[name] = factory
        return factory

    return decorator


def get_unit_factory(name: str) -> UnitFactory:
    """Return the factory registered under ``name``.

    Raises:
        KeyError: If no unit is registered under ``name``.
    """
    try:
        return _REGISTRY[name]
    except KeyError:
        raise KeyError(
            f"Unknown scoring unit '{name}'. Registered: {registered_units()}"
        ) from None


def registered_units() -> list[str]:
    """Sorted names of every registered unit."""
    return sorted(_REGISTRY)


def _accepted_kwargs(factory: UnitFactory, deps: dict[str, Any]) -> dict[str, Any]:
    params = inspect.signature(factory).parameters.values()
    if any(p.kind is inspect.Parameter.VAR_KEYWORD for p in params):
        return dict(deps)
    names = {p.name for p in params}
    return {k: v for k, v in deps.items() if k in names}


def build_units(names: Iterable[str], **deps: Any) -> list[ScoringUnit]:
    """Instantiate the named units, in order.

    Args:
        names: Registered unit names, in dispatch order.
        **deps: Dependencies offered to every factory (e.g. ``graph=...``).

    Raises:
        KeyError: If any name is not registered.
    """
    return [
        factory(**_accepted_kwargs(factory, deps))
        for factory in (get_unit_factory(name) for name in names)
    ]
