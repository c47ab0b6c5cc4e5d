"""Registry for selection strategy implementations.

Uses a decorator pattern for registration. The ``build()`` method handles
the optional ``seed`` constructor argument needed by stochastic strategies.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from collections.abc import Callable

    from beam_decoder.selection.base import SelectionStrategy


class SelectionStrategyRegistry:
    """Registry mapping string names to SelectionStrategy classes.

    Built-in strategies register via the
    ``@SelectionStrategyRegistry.register()`` decorator.
    """

    _registry: ClassVar[dict[str, type[SelectionStrategy]]] = {}

    @classmethod
    def register(
        cls, name: str
    ) -> Callable[[type[SelectionStrategy]], type[SelectionStrategy]]:
        """Decorator that registers a SelectionStrategy class under *name*.

        Args:
            name: Identifier of the strategy.

        Returns:
            Decorator that registers the class and returns it unchanged.

        Raises:
            ValueError: If *name* is already registered.
        """

        def decorator(klass: type[SelectionStrategy]) -> type[SelectionStrategy]:
            if name in cls._registry:
                raise ValueError(f"Selection strategy '{name}' is already registered")
            cls._registry[name] = klass
            return klass

        return decorator

    @classmethod
    def get(cls, name: str) -> type[SelectionStrategy]:
        """Return the strategy class registered under *name*.

        Raises:
            KeyError: If *name* is not registered.
        """
        if name not in cls._registry:
            available = ", ".join(sorted(cls._registry)) or "(none)"
            raise KeyError(f"Unknown selection strategy '{name}'. Available: {available}")
        return cls._registry[name]

    @classmethod
    def build(cls, name: str, seed: int | None = None) -> SelectionStrategy:
        """Instantiate the strategy registered under *name*.

        If the strategy constructor accepts a ``seed`` argument (detected via
        try/except), it is passed. Otherwise, the constructor is called with
        no arguments.

        Args:
            name: Registered strategy name.
            seed: Seed for stochastic strategies.

        Returns:
            A fully constructed SelectionStrategy instance.
        """
        klass = cls.get(name)
        try:
            return klass(seed=seed)  # type: ignore[call-arg]
        except TypeError:
            return klass()

    @classmethod
    def list_registered(cls) -> list[str]:
        """Return sorted list of registered strategy names."""
        return sorted(cls._registry)
