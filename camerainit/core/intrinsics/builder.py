"""Construction of view intrinsics from resolved sensor and lens values."""

from typing import Optional

from ..math.intrinsics import focal_pix_from_fov, focal_pix_from_mm
from ..models.entities import CameraModel, InitializationMode, Intrinsic, View

# 35mm-equivalent focal lengths below this are treated as fisheye lenses
FISHEYE_FOCAL_IN_35MM_THRESHOLD = 18.0


def choose_camera_model(view: View, requested: Optional[CameraModel] = None) -> CameraModel:
    """Pick the camera model family for a view.

    An explicitly requested model always wins. Otherwise very wide lenses
    (short 35mm-equivalent focal) get a fisheye model, everything else a
    3-coefficient radial model.
    """
    if requested is not None:
        return requested
    focal_in_35mm = view.get_focal_in_35mm()
    if focal_in_35mm is not None and focal_in_35mm < FISHEYE_FOCAL_IN_35MM_THRESHOLD:
        return CameraModel.FISHEYE4
    return CameraModel.RADIAL3


def serial_number_of(view: View) -> str:
    """Body and lens serial numbers when known, camera make and model otherwise."""
    body = view.get_body_serial_number()
    lens = view.get_lens_serial_number()
    if body or lens:
        return body + lens
    return view.get_make() + view.get_model()


def build_intrinsic(
    view: View,
    focal_length_mm: Optional[float],
    sensor_width_mm: Optional[float],
    default_focal_length_pix: Optional[float] = None,
    default_field_of_view: Optional[float] = None,
    camera_model: Optional[CameraModel] = None,
    default_ppx: Optional[float] = None,
    default_ppy: Optional[float] = None,
    resolved_mode: InitializationMode = InitializationMode.COMPUTED_FROM_METADATA
) -> Intrinsic:
    """Build the intrinsic of a view.

    Focal length priority: sensor width and focal length from metadata,
    then the default pixel focal, then the default field of view. When none
    is available the intrinsic is left unresolved (focal length -1).

    Args:
        view: View whose dimensions and metadata are used
        focal_length_mm: Resolved focal length, None if unresolved
        sensor_width_mm: Resolved sensor width, None if unresolved
        default_focal_length_pix: Fallback focal length in pixels
        default_field_of_view: Fallback horizontal field of view in degrees
        camera_model: Camera model family, chosen from metadata when None
        default_ppx: Principal point x, image center when unset
        default_ppy: Principal point y, image center when unset
        resolved_mode: Mode recorded when metadata provided the focal length

    Returns:
        New intrinsic, not yet registered in any project
    """
    if focal_length_mm is not None and sensor_width_mm is not None:
        focal_pix = focal_pix_from_mm(focal_length_mm, sensor_width_mm, view.width)
        mode = resolved_mode
    elif default_focal_length_pix is not None and default_focal_length_pix > 0:
        focal_pix = default_focal_length_pix
        mode = InitializationMode.SET_FROM_DEFAULT_FOCAL
    elif default_field_of_view is not None and default_field_of_view > 0:
        focal_pix = focal_pix_from_fov(default_field_of_view, view.width)
        mode = InitializationMode.SET_FROM_DEFAULT_FOV
    else:
        focal_pix = -1.0
        mode = InitializationMode.NONE

    ppx = view.width / 2.0
    ppy = view.height / 2.0
    if default_ppx is not None and default_ppy is not None and default_ppx > 0 and default_ppy > 0:
        ppx, ppy = default_ppx, default_ppy

    return Intrinsic(
        model=choose_camera_model(view, camera_model),
        width=view.width,
        height=view.height,
        focal_length_pix=float(focal_pix),
        initial_focal_length_pix=float(focal_pix),
        principal_point=[float(ppx), float(ppy)],
        serial_number=serial_number_of(view),
        initialization_mode=mode,
    )
