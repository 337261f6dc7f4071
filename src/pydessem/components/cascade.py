"""
River-basin cascade graph for hydroelectric plants.

Each plant names at most one downstream plant, so the cascade is a
forest of in-trees: headwater plants (roots) drain through a chain of
downstream plants into a sink. This module builds the parent/child
adjacency from ``Plant.downstream_plant`` and answers traversal and
aggregation queries. Every walk is guarded against cycles, which can
appear in malformed registries.
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from pydessem.components.plant import Plant
from pydessem.core.base_component import BaseComponent
from pydessem.core.exceptions import CycleDetectedError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StorageTotals:
    """
    Summed reservoir volumes along a cascade walk.

    Attributes:
        min_volume: Sum of minimum volumes (hm3)
        max_volume: Sum of maximum volumes (hm3)
        n_plants: Number of plants summed
    """

    min_volume: float
    max_volume: float
    n_plants: int

    @property
    def useful_volume(self) -> float:
        return self.max_volume - self.min_volume


@dataclass(frozen=True)
class UnresolvedReference:
    """A downstream or diversion reference to a plant that does not exist."""

    plant_num: int
    field: str
    target: int


class CascadeGraph(BaseComponent):
    """
    Cascade topology of a plant registry.

    Placeholder plants (``plant_num <= 0``) are not part of the graph.
    When a plant number repeats, the first plant wins.

    Example:
        >>> graph = CascadeGraph(registry.plants)
        >>> graph.downstream_chain(6)
        [6, 7, 8]
    """

    def __init__(self, plants: Iterable[Plant]) -> None:
        nodes: dict[int, Plant] = {}
        for plant in plants:
            if plant.plant_num <= 0:
                continue
            if plant.plant_num in nodes:
                continue
            nodes[plant.plant_num] = plant

        downstream: dict[int, int | None] = {}
        upstream: dict[int, list[int]] = defaultdict(list)
        for num, plant in nodes.items():
            target = plant.downstream_plant or None
            downstream[num] = target
            if target is not None:
                upstream[target].append(num)

        self._plants = MappingProxyType(nodes)
        self._downstream = MappingProxyType(downstream)
        self._upstream = MappingProxyType({k: tuple(sorted(v)) for k, v in upstream.items()})

    # -- sizing -------------------------------------------------------------
    @property
    def n_items(self) -> int:
        """Return number of plants in the graph."""
        return len(self._plants)

    @property
    def plants(self) -> Mapping[int, Plant]:
        """Read-only mapping of plant number to plant."""
        return self._plants

    def __contains__(self, plant_num: object) -> bool:
        return plant_num in self._plants

    def __len__(self) -> int:
        return len(self._plants)

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._plants))

    # -- local queries ------------------------------------------------------
    def downstream_of(self, plant_num: int) -> int | None:
        """Return the raw downstream reference of *plant_num*."""
        return self._downstream[plant_num]

    def upstream_of(self, plant_num: int) -> list[int]:
        """Return plants whose downstream plant is *plant_num* (one level)."""
        return list(self._upstream.get(plant_num, ()))

    def roots(self) -> list[int]:
        """Return plants never referenced as another plant's downstream plant."""
        referenced = {
            target
            for num, target in self._downstream.items()
            if target is not None and target != num
        }
        return sorted(num for num in self._plants if num not in referenced)

    def sinks(self) -> list[int]:
        """Return plants whose discharge leaves the registry.

        A sink has no downstream plant, or one that does not resolve.
        """
        return sorted(
            num
            for num, target in self._downstream.items()
            if target is None or target not in self._plants
        )

    # -- traversal ----------------------------------------------------------
    def downstream_chain(self, plant_num: int) -> list[int]:
        """
        Follow downstream references starting at *plant_num*.

        The walk ends at a plant with no downstream plant, or whose
        downstream reference does not resolve.

        Returns:
            Plant numbers in walk order, starting with *plant_num*

        Raises:
            KeyError: If *plant_num* is not in the graph
            CycleDetectedError: If a plant is reached twice
        """
        if plant_num not in self._plants:
            raise KeyError(plant_num)

        chain: list[int] = []
        seen: set[int] = set()
        current: int | None = plant_num
        while current is not None:
            if current in seen:
                raise CycleDetectedError(current, chain)
            seen.add(current)
            chain.append(current)

            target = self._downstream[current]
            if target is not None and target not in self._plants:
                logger.debug("Plant %d drains into unknown plant %d", current, target)
                target = None
            current = target
        return chain

    def aggregate_storage(self, root: int) -> StorageTotals:
        """
        Sum minimum and maximum volumes along ``downstream_chain(root)``.

        Missing volumes count as zero.

        Raises:
            KeyError: If *root* is not in the graph
            CycleDetectedError: If the walk revisits a plant
        """
        chain = self.downstream_chain(root)
        min_total = 0.0
        max_total = 0.0
        for num in chain:
            plant = self._plants[num]
            min_total += plant.min_volume or 0.0
            max_total += plant.max_volume or 0.0
        return StorageTotals(min_volume=min_total, max_volume=max_total, n_plants=len(chain))

    def basin(self, sink: int) -> list[int]:
        """Return *sink* and every plant that drains into it, sorted."""
        if sink not in self._plants:
            raise KeyError(sink)
        seen = {sink}
        queue = deque([sink])
        while queue:
            num = queue.popleft()
            for parent in self._upstream.get(num, ()):
                if parent not in seen:
                    seen.add(parent)
                    queue.append(parent)
        return sorted(seen)

    def find_cycles(self) -> list[list[int]]:
        """
        Return every downstream cycle.

        Each cycle starts at its smallest plant number, in walk order.
        """
        state: dict[int, int] = {}  # 1 = on current path, 2 = done
        cycles: list[list[int]] = []
        for start in sorted(self._plants):
            if start in state:
                continue
            path: list[int] = []
            current: int | None = start
            while current is not None and current in self._plants and current not in state:
                state[current] = 1
                path.append(current)
                current = self._downstream[current]
            if current is not None and state.get(current) == 1:
                cycle = path[path.index(current) :]
                pivot = cycle.index(min(cycle))
                cycles.append(cycle[pivot:] + cycle[:pivot])
            for num in path:
                state[num] = 2
        return sorted(cycles)

    def unresolved_references(self) -> list[UnresolvedReference]:
        """Return downstream/diversion references to unknown plants."""
        unresolved: list[UnresolvedReference] = []
        for num in sorted(self._plants):
            plant = self._plants[num]
            for field_name in ("downstream_plant", "diversion_plant"):
                target = getattr(plant, field_name)
                if target and target not in self._plants:
                    unresolved.append(UnresolvedReference(num, field_name, target))
        return unresolved

    def validate(self) -> None:
        """
        Check the cascade for cycles and dangling references.

        Raises:
            ValidationError: Listing every problem found
        """
        errors = [
            "Cycle: " + " -> ".join(str(n) for n in [*cycle, cycle[0]])
            for cycle in self.find_cycles()
        ]
        errors.extend(
            f"Plant {ref.plant_num} {ref.field} references unknown plant {ref.target}"
            for ref in self.unresolved_references()
        )
        if errors:
            raise ValidationError(f"Cascade has {len(errors)} problem(s)", errors=errors)

    def __repr__(self) -> str:
        return f"CascadeGraph(n_plants={self.n_items}, n_roots={len(self.roots())})"
