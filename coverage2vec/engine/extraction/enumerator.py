"""Two-pass 4-connected region labeling with a union-find id map.

Rows are fed top to bottom. Each foreground pixel either continues the run
to its left, continues the region above, or opens a new id; when a run
touches two different regions they are merged in the id map. Background
pixels get id -1.
"""

from __future__ import annotations

from collections.abc import Sequence

BACKGROUND = -1


class PolygonEnumerator:
    """Assigns provisional region ids row by row and records merges."""

    def __init__(self) -> None:
        self.id_map: list[int] = []

    @property
    def next_id(self) -> int:
        return len(self.id_map)

    def new_polygon(self) -> int:
        pid = len(self.id_map)
        self.id_map.append(pid)
        return pid

    def root(self, pid: int) -> int:
        while self.id_map[pid] != pid:
            pid = self.id_map[pid]
        return pid

    def merge_polygon(self, src: int, dst: int) -> None:
        """Point both chains (src and dst) at dst's final id."""
        final = self.root(dst)

        cur = dst
        while self.id_map[cur] != cur:
            nxt = self.id_map[cur]
            self.id_map[cur] = final
            cur = nxt

        cur = src
        while self.id_map[cur] != cur:
            nxt = self.id_map[cur]
            self.id_map[cur] = final
            cur = nxt
        self.id_map[cur] = final

    def process_line(
        self,
        values: Sequence[int],
        prev_values: Sequence[int] | None = None,
        prev_ids: Sequence[int] | None = None,
    ) -> list[int]:
        """Label one row; pass the previous row's values and ids after the first."""
        width = len(values)
        ids = [BACKGROUND] * width

        for i in range(width):
            v = int(values[i])
            if v == 0:
                continue

            left_same = i > 0 and int(values[i - 1]) == v
            above_same = prev_values is not None and int(prev_values[i]) == v

            if left_same:
                ids[i] = ids[i - 1]
                if above_same and self.root(ids[i]) != self.root(prev_ids[i]):
                    self.merge_polygon(prev_ids[i], ids[i])
            elif above_same:
                ids[i] = prev_ids[i]
            else:
                ids[i] = self.new_polygon()

        return ids

    def complete_merges(self) -> int:
        """Flatten every chain to its final id; returns the number of final regions."""
        final = 0
        for pid in range(len(self.id_map)):
            while self.id_map[pid] != self.id_map[self.id_map[pid]]:
                self.id_map[pid] = self.id_map[self.id_map[pid]]
            if self.id_map[pid] == pid:
                final += 1
        return final

    def final_id(self, pid: int) -> int:
        if pid == BACKGROUND:
            return BACKGROUND
        return self.id_map[pid]
