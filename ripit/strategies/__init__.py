"""Segment strategy registry, ordered by priority."""

from ripit.strategies.base import SegmentStrategy

STRATEGY_REGISTRY: dict[str, type[SegmentStrategy]] = {}


def register_strategy(name: str):
    """Decorator to register a strategy class.

    Strategies are tried in registration order.
    """
    def decorator(cls):
        STRATEGY_REGISTRY[name] = cls
        return cls
    return decorator


def get_strategy(name: str, **kwargs) -> SegmentStrategy:
    """Instantiate a strategy by name."""
    if name not in STRATEGY_REGISTRY:
        available = ", ".join(STRATEGY_REGISTRY.keys()) or "(nessuna)"
        raise ValueError(f"Strategia sconosciuta '{name}'. Disponibili: {available}")
    return STRATEGY_REGISTRY[name](**kwargs)


def list_strategies() -> list[str]:
    """Return names of all registered strategies in priority order."""
    return list(STRATEGY_REGISTRY.keys())


# Import order is priority order
from ripit.strategies import chapters, description, silence  # noqa: E402,F401
