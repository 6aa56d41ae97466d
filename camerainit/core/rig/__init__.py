"""Multi-camera rig detection."""

from .detector import RigAnnotation, RigRegistry, detect_rig, rig_id_of

__all__ = [
    "RigAnnotation",
    "RigRegistry",
    "detect_rig",
    "rig_id_of",
]
