"""
Proximity-based identity assignment.

Matches the current frame's person boxes against the last known centers
held by the position tracker, nearest pair first, within a distance gate.
Unmatched boxes get a freshly allocated id. There is no appearance model;
two people swapping places between frames will swap ids.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from models.detection import RawDetection


Point = Tuple[float, float]


class ProximityIdentityMatcher:
    """
    Greedy nearest-neighbour matcher between detections and known ids.

    Example:
        matcher = ProximityIdentityMatcher(max_distance_px=150)
        ids = matcher.assign(person_detections, tracker.positions())
    """

    def __init__(self, max_distance_px: float = 150.0, id_prefix: str = "person"):
        """
        Args:
            max_distance_px: Largest center distance accepted as the same person.
            id_prefix: Prefix for allocated ids ("person" -> "person-0", ...).
        """
        self.max_distance_px = max_distance_px
        self.id_prefix = id_prefix
        self.next_id = 0

    def _allocate(self, taken) -> str:
        person_id = f"{self.id_prefix}-{self.next_id}"
        self.next_id += 1
        while person_id in taken:
            person_id = f"{self.id_prefix}-{self.next_id}"
            self.next_id += 1
        return person_id

    def assign(
        self,
        detections: Sequence[RawDetection],
        known: Optional[Dict[str, Point]] = None,
    ) -> List[str]:
        """
        Assign an id to every detection, preserving detection order.

        Args:
            detections: Person detections for the current frame.
            known: Last known center per tracked id.

        Returns:
            One id per detection; no id is used twice.
        """
        if not detections:
            return []

        assigned: List[Optional[str]] = [None] * len(detections)
        known = known or {}

        if known:
            known_ids = list(known.keys())
            known_centers = np.array([known[k] for k in known_ids], dtype=float)
            det_centers = np.array([d.center for d in detections], dtype=float)
            # distances[i, j]: known id i to detection j
            distances = np.linalg.norm(
                known_centers[:, None, :] - det_centers[None, :, :], axis=2
            )

            unmatched_known = set(range(len(known_ids)))
            unmatched_dets = set(range(len(detections)))

            while unmatched_known and unmatched_dets:
                best: Optional[Tuple[int, int]] = None
                best_dist = float("inf")
                for i in unmatched_known:
                    for j in unmatched_dets:
                        if distances[i, j] < best_dist:
                            best_dist = distances[i, j]
                            best = (i, j)

                if best is None or best_dist > self.max_distance_px:
                    break

                i, j = best
                assigned[j] = known_ids[i]
                unmatched_known.discard(i)
                unmatched_dets.discard(j)

        # Known ids stay reserved even when unmatched this frame
        taken = set(known) | {pid for pid in assigned if pid is not None}
        for j, person_id in enumerate(assigned):
            if person_id is None:
                assigned[j] = self._allocate(taken)
                taken.add(assigned[j])
                logging.debug(f"[IDENTITY] new id {assigned[j]} at {detections[j].center}")

        return assigned  # type: ignore[return-value]

    def reset(self) -> None:
        self.next_id = 0
