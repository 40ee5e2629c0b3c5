"""Entities, players and the small math types they are built from."""

from dataclasses import dataclass, field
from enum import IntEnum

_U64_MAX = (1 << 64) - 1


class GameMode(IntEnum):
    SURVIVAL = 0
    CREATIVE = 1
    ADVENTURE = 2
    SPECTATOR = 3


@dataclass(frozen=True)
class UUID:
    """A 128-bit identifier held as two unsigned 64-bit halves."""

    most: int
    least: int

    def __post_init__(self):
        for name in ("most", "least"):
            value = getattr(self, name)
            if not 0 <= value <= _U64_MAX:
                raise ValueError(f"{name} must fit in an unsigned 64-bit integer")

    def __str__(self):
        return f"{self.most:x}{self.least:x}"


@dataclass
class Position:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    yaw: float = 0.0
    pitch: float = 0.0

    def cx(self):
        """Chunk column index along the x axis."""
        return int(self.x) >> 4

    def cz(self):
        """Chunk column index along the z axis."""
        return int(self.z) >> 4


@dataclass
class Vec3D:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


class Entity:
    """Something in the world with an identity and a position."""

    def __init__(self, uuid):
        self.uuid = uuid
        self.position = Position()


class Player(Entity):
    def __init__(self, uuid, username):
        super().__init__(uuid)
        self.username = username