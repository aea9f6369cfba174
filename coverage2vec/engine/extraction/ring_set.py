"""RingSet — unit boundary edges of one region, stitched into closed rings."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

Point = tuple[int, int]


class RingSet:
    """Open polylines of one region, coalesced into rings once the region is complete."""

    def __init__(self, region_id: int) -> None:
        self.region_id = region_id
        self.strings: list[list[Point]] = []
        self.last_line_updated = -1

    def add_segment(self, x1: int, y1: int, x2: int, y2: int) -> None:
        """Extend the first polyline ending at either endpoint, else start a new one."""
        self.last_line_updated = max(self.last_line_updated, y1, y2)
        p1 = (x1, y1)
        p2 = (x2, y2)
        for string in self.strings:
            end = string[-1]
            if end == p1:
                string.append(p2)
                return
            if end == p2:
                string.append(p1)
                return
        self.strings.append([p1, p2])

    def _remove(self, index: int) -> None:
        last = self.strings.pop()
        if index < len(self.strings):
            self.strings[index] = last

    def coalesce(self) -> None:
        """Join polylines end to end until no two can be joined."""
        i = 0
        while i < len(self.strings):
            base = self.strings[i]
            merged = True
            while merged:
                merged = False
                j = i + 1
                while j < len(self.strings):
                    other = self.strings[j]
                    if base[-1] == other[0]:
                        base.extend(other[1:])
                    elif base[-1] == other[-1]:
                        base.extend(reversed(other[:-1]))
                    else:
                        j += 1
                        continue
                    self._remove(j)
                    merged = True
            i += 1

        for string in self.strings:
            if string[0] != string[-1]:
                logger.warning(
                    "Region %d: open ring of %d points, closing it", self.region_id, len(string)
                )
                string.append(string[0])

    @property
    def rings(self) -> list[list[Point]]:
        return self.strings
