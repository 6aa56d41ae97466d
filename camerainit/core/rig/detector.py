"""Detection of multi-camera rigs from the image folder layout.

Rig images are expected under ``.../rig/<subPoseId>/<frameId>.<ext>``: one
folder per physical camera, one file per synchronized capture.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from pathlib import PurePath
from typing import Dict, Optional

from ..errors import RigStructureError
from ..math.hashing import stable_hash
from ..models.entities import Rig

logger = logging.getLogger(__name__)

RIG_FOLDER_NAME = "rig"


@dataclass(frozen=True)
class RigAnnotation:
    """Rig membership of one view."""

    rig_id: int
    sub_pose_id: int
    frame_id: int


def rig_id_of(rig_path: str) -> int:
    """Stable rig id for the path of a rig folder."""
    return stable_hash("rig", rig_path)


def detect_rig(image_path: str) -> Optional[RigAnnotation]:
    """Parse the rig annotation of an image path.

    Args:
        image_path: Path of the image

    Returns:
        The annotation, or None if the image is not part of a rig. Paths that
        look like rig paths but do not hold integer ids are logged and
        treated as single images.
    """
    path = PurePath(image_path)
    parent = path.parent
    rig_path = parent.parent
    if rig_path.stem != RIG_FOLDER_NAME:
        return None

    try:
        frame_id = int(path.stem)
        sub_pose_id = int(parent.stem)
    except ValueError:
        logger.warning(f"Invalid rig structure for view: {image_path}\nUsed as single image.")
        return None

    return RigAnnotation(
        rig_id=rig_id_of(str(rig_path)),
        sub_pose_id=sub_pose_id,
        frame_id=frame_id,
    )


class RigRegistry:
    """Counts poses per rig camera and validates rig structures."""

    def __init__(self):
        self.pose_counts: Dict[int, Dict[int, int]] = defaultdict(lambda: defaultdict(int))

    def __len__(self) -> int:
        return len(self.pose_counts)

    def add(self, annotation: RigAnnotation) -> None:
        """Count one pose for the annotation's rig camera."""
        self.pose_counts[annotation.rig_id][annotation.sub_pose_id] += 1

    def validate(self) -> Dict[int, Rig]:
        """Check every rig and build the rig map.

        Each rig must have sub-pose ids in [0, sub_pose_count) and the same
        number of poses for every sub-pose.

        Returns:
            Rigs by id

        Raises:
            RigStructureError: On the first inconsistent rig
        """
        rigs = {}
        for rig_id in sorted(self.pose_counts):
            counts = self.pose_counts[rig_id]
            sub_pose_count = len(counts)
            sub_pose_ids = sorted(counts)
            pose_count = counts[sub_pose_ids[0]]

            for sub_pose_id in sub_pose_ids:
                if sub_pose_id < 0 or sub_pose_id >= sub_pose_count:
                    raise RigStructureError(
                        f"Wrong subPoseId {sub_pose_id} in detected rig structure {rig_id} "
                        f"(expected 0 to {sub_pose_count - 1})."
                    )
                if counts[sub_pose_id] != pose_count:
                    raise RigStructureError(
                        f"Wrong number of poses per subPose in detected rig structure {rig_id} "
                        f"({counts[sub_pose_id]} != {pose_count}) for subPoseId {sub_pose_id}."
                    )

            rigs[rig_id] = Rig(sub_pose_count=sub_pose_count)
        return rigs
