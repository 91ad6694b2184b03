"""Compass directions and the directional persistence covariate.

States in a rook-adjacency statespace remember the compass direction of the
move used to arrive at their location. The persistence covariate compares the
arrival direction of a state with the direction of a candidate next move:

============  =====  ====  =====  ====
x \\ y        north  east  south  west
============  =====  ====  =====  ====
north           +1     0    -1     0
east             0    +1     0    -1
south           -1     0    +1     0
west             0    -1     0    +1
============  =====  ====  =====  ====

so continuing straight scores +1, reversing scores -1 and turning scores 0.
"""

from __future__ import annotations

from enum import IntEnum

import numpy as np
from numpy.typing import NDArray

from ctds.errors import InvalidInputError

__all__ = [
    "PERSISTENCE_COVARIATES",
    "CardinalDirection",
    "directional_persistence_covariate",
]


class CardinalDirection(IntEnum):
    """Rook-adjacency compass directions.

    The integer values fix the order in which neighbors are enumerated
    everywhere in the package.
    """

    NORTH = 0
    EAST = 1
    SOUTH = 2
    WEST = 3

    def __str__(self) -> str:
        return self.name.lower()

    def __format__(self, format_spec: str) -> str:
        # IntEnum formats as the integer value otherwise
        return format(str(self), format_spec)

    @classmethod
    def from_string(cls, name: str | CardinalDirection) -> CardinalDirection:
        """Parse a direction name such as ``"north"`` (case-insensitive).

        Raises
        ------
        InvalidInputError
            If `name` is not one of north, east, south, west.
        """
        if isinstance(name, CardinalDirection):
            return name
        try:
            return cls[str(name).strip().upper()]
        except KeyError:
            raise InvalidInputError(
                f"invalid direction {name!r}; expected one of "
                "'north', 'east', 'south', 'west'"
            ) from None

    @property
    def opposite(self) -> CardinalDirection:
        """Direction pointing the other way."""
        return CardinalDirection((self.value + 2) % 4)

    @property
    def geographic_step(self) -> tuple[int, int]:
        """Unit move ``(d_easting, d_northing)`` in geographic terms."""
        return _GEOGRAPHIC_STEPS[self]


_GEOGRAPHIC_STEPS = {
    CardinalDirection.NORTH: (0, 1),
    CardinalDirection.EAST: (1, 0),
    CardinalDirection.SOUTH: (0, -1),
    CardinalDirection.WEST: (-1, 0),
}

PERSISTENCE_COVARIATES: NDArray[np.float64] = np.array(
    [
        [1.0, 0.0, -1.0, 0.0],
        [0.0, 1.0, 0.0, -1.0],
        [-1.0, 0.0, 1.0, 0.0],
        [0.0, -1.0, 0.0, 1.0],
    ]
)
PERSISTENCE_COVARIATES.setflags(write=False)


def directional_persistence_covariate(
    x: CardinalDirection | str, y: CardinalDirection | str
) -> float:
    """Signed persistence covariate between arrival direction `x` and move `y`.

    Examples
    --------
    >>> directional_persistence_covariate("north", "north")
    1.0
    >>> directional_persistence_covariate("east", "west")
    -1.0
    >>> directional_persistence_covariate("south", "east")
    0.0
    """
    x = CardinalDirection.from_string(x)
    y = CardinalDirection.from_string(y)
    return float(PERSISTENCE_COVARIATES[x, y])
