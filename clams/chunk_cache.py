"""Chunk storage and chunk requests around a player."""


class Chunk:
    """A column of world data."""


class ChunkCache:
    """Looks up loaded chunks by chunk coordinates."""

    def at(self, cx, cz):
        """Return the loaded chunk at (cx, cz), or None if it is not loaded."""
        return None

    def request_chunks(self, player, distance):
        """Request every chunk within a diamond of the given radius around the player.

        Returns a (2*distance+1)-square grid, indexed [dx + distance][dz + distance],
        where True marks a chunk that had to be scheduled for loading. The grid is
        also printed, one row per line, '@' for a pending load and '.' otherwise.
        """
        if distance < 0:
            raise ValueError("distance must not be negative")

        pos = player.position
        cx, cz = pos.cx(), pos.cz()
        side = 2 * distance + 1
        pending = [[False] * side for _ in range(side)]

        for i in range(-distance, distance + 1):
            reach = distance - abs(i)
            for j in range(-reach, reach + 1):
                if self.at(cx + i, cz + j) is None:
                    pending[i + distance][j + distance] = True
                else:
                    print(f"Sending chunk at [cx + {i}, cz + {j}] to player")

        for row in pending:
            print("".join(("@" if cell else ".") + "  " for cell in row))

        return pending