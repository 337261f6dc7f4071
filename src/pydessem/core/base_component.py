"""Abstract base class for registry components.

The plant registry and the cascade graph share a common interface
defined by :class:`BaseComponent`, so callers can validate and size
them generically.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseComponent(ABC):
    """Abstract base class for registry components.

    Every component must implement:

    * :meth:`validate` -- raise :class:`ValidationError` when the
      component state is inconsistent.
    * :attr:`n_items` -- number of primary entities managed by the
      component (e.g., number of plants).
    """

    @abstractmethod
    def validate(self) -> None:
        """Validate the component state.

        Raises
        ------
        ValidationError
            If the component state is invalid.
        """
        ...

    @property
    @abstractmethod
    def n_items(self) -> int:
        """Return the number of primary entities in this component."""
        ...
