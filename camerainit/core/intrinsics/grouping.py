"""Grouping of views into shared intrinsics."""

import random
from typing import Container, Optional

from ..models.entities import Intrinsic, View
from ..models.project import SfMProject

# Grouping policies
UNGROUPED = 0
GROUP_BY_METADATA = 1
GROUP_BY_METADATA_OR_FOLDER = 2


class IdGenerator:
    """Seeded source of intrinsic ids for views that are never grouped."""

    def __init__(self, seed: int = 0):
        self._rng = random.Random(seed)

    def _candidate(self) -> int:
        return self._rng.getrandbits(32)

    def next_id(self, taken: Container[int] = ()) -> int:
        """Get an id that is not in ``taken``."""
        candidate = self._candidate()
        while candidate in taken:
            candidate = self._candidate()
        return candidate


class CounterIdGenerator(IdGenerator):
    """Sequential ids, starting at ``start``."""

    def __init__(self, start: int = 0):
        self._next = start

    def _candidate(self) -> int:
        candidate = self._next
        self._next += 1
        return candidate


def rig_serial_number(rig_id: int, sub_pose_id: int) -> str:
    return f"no_metadata_rig_{rig_id}_{sub_pose_id}"


class GroupingEngine:
    """Decides which intrinsic id each view uses.

    Work is split in two steps so that the per-view part can run on any
    worker: ``group_key`` only looks at the view and its freshly built
    intrinsic, ``assign`` touches the shared intrinsic map and must be
    called serially, in a reproducible view order.
    """

    def __init__(self, policy: int = GROUP_BY_METADATA_OR_FOLDER, id_generator: Optional[IdGenerator] = None):
        """Initialize grouping engine.

        Args:
            policy: 0 (ungrouped), 1 (metadata) or 2 (metadata, else folder or rig camera)
            id_generator: Source of ids for ungrouped views
        """
        if policy not in (UNGROUPED, GROUP_BY_METADATA, GROUP_BY_METADATA_OR_FOLDER):
            raise ValueError(f"Unknown grouping policy {policy}")
        self.policy = policy
        self.id_generator = id_generator or IdGenerator()

    def group_key(self, view: View, intrinsic: Intrinsic, has_camera_metadata: bool) -> Optional[int]:
        """Compute the intrinsic id a view should share, None for a fresh id.

        Under policy 2, views without camera metadata get their serial number
        replaced by their folder (frames of one video share an intrinsic) or,
        for rig views, by their rig camera, before hashing.

        Args:
            view: View being processed, with rig annotation if any
            intrinsic: Intrinsic built for the view, updated in place
            has_camera_metadata: Whether the view has a make or model

        Returns:
            Candidate intrinsic id, or None if the view must not be grouped
        """
        if self.policy == UNGROUPED:
            return None

        if not has_camera_metadata:
            if self.policy == GROUP_BY_METADATA and view.intrinsic_id is None:
                return None
            if self.policy == GROUP_BY_METADATA_OR_FOLDER:
                if view.is_part_of_rig():
                    intrinsic.serial_number = rig_serial_number(view.rig_id, view.sub_pose_id)
                else:
                    intrinsic.serial_number = view.folder()

        if view.intrinsic_id is not None:
            return view.intrinsic_id
        return intrinsic.hash_value()

    def assign(self, key: Optional[int], intrinsic: Intrinsic, project: SfMProject) -> int:
        """Register an intrinsic under its key and return its id.

        An id already holding a resolved intrinsic is reused as-is; an
        unresolved one is replaced by the new intrinsic.
        """
        if key is None:
            intrinsic_id = self.id_generator.next_id(project.intrinsics)
            project.add_intrinsic(intrinsic_id, intrinsic)
            return intrinsic_id

        existing = project.intrinsics.get(key)
        if existing is None or not existing.is_resolved():
            project.intrinsics[key] = intrinsic
        return key
