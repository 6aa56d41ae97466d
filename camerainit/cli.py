"""Command line entry point: create the initial project of an image dataset."""

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from . import __version__
from .core.errors import CameraInitError
from .core.models.entities import CameraModel
from .core.models.project import CameraInitOptions
from .core.pipeline.engine import CameraInitEngine
from .core.sensors.database import SensorDatabase
from .io.images import project_from_images
from .io.project_io import load_project, save_project

logger = logging.getLogger("camerainit")

VERBOSE_LEVELS = {
    "fatal": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": logging.DEBUG,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="camerainit",
        description="Create the views and initial intrinsics of an image dataset.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    inputs = parser.add_mutually_exclusive_group(required=True)
    inputs.add_argument("-i", "--input", type=Path, help="Project file (*.sfm, JSON) to complete.")
    inputs.add_argument("--image-folder", type=Path, help="Folder of input images.")

    parser.add_argument(
        "-s", "--sensor-database", type=Path, required=True,
        help="Camera sensor width database path.",
    )
    parser.add_argument(
        "-o", "--output", type=Path, default=Path("cameraInit.sfm"),
        help="Output project file path.",
    )
    parser.add_argument(
        "--default-focal-length-pix", type=float, default=-1.0,
        help="Focal length in pixels (or -1 to unset).",
    )
    parser.add_argument(
        "--default-field-of-view", type=float, default=-1.0,
        help="Empirical field of view in degrees (or -1 to unset).",
    )
    parser.add_argument(
        "--default-intrinsic", type=str, default="",
        help='Intrinsics K matrix "f;0;ppx;0;f;ppy;0;0;1".',
    )
    parser.add_argument(
        "--default-camera-model", type=str, default=None,
        choices=[m.value for m in CameraModel],
        help="Camera model type.",
    )
    parser.add_argument(
        "--group-camera-model", type=int, default=2, choices=[0, 1, 2],
        help=(
            "0: each view has its own camera intrinsic parameters; "
            "1: views share intrinsics based on metadata, each view without metadata has its own; "
            "2: views share intrinsics based on metadata, views without metadata are grouped by folder."
        ),
    )
    parser.add_argument(
        "--allow-incomplete-output", action="store_true",
        help="Write the project even if some views have no initialized intrinsic.",
    )
    parser.add_argument(
        "--allow-single-view", action="store_true",
        help="Allow a result with a single initialized view.",
    )
    parser.add_argument("--workers", type=int, default=4, help="Worker threads.")
    parser.add_argument(
        "-v", "--verbose-level", default="info", choices=list(VERBOSE_LEVELS),
        help="Verbosity level.",
    )
    return parser


def options_from_args(args: argparse.Namespace) -> CameraInitOptions:
    """Translate command line values (-1 and "" meaning unset) into options."""
    return CameraInitOptions(
        default_focal_length_pix=args.default_focal_length_pix if args.default_focal_length_pix > 0 else None,
        default_field_of_view=args.default_field_of_view if args.default_field_of_view > 0 else None,
        default_intrinsic=args.default_intrinsic or None,
        default_camera_model=args.default_camera_model,
        group_camera_model=args.group_camera_model,
        allow_incomplete_output=args.allow_incomplete_output,
        allow_single_view=args.allow_single_view,
        max_workers=args.workers,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=VERBOSE_LEVELS[args.verbose_level],
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
    )

    try:
        options = options_from_args(args)
    except ValidationError as e:
        logger.error(f"Invalid options:\n{e}")
        return 1

    try:
        database = SensorDatabase.load(args.sensor_database)
        if args.image_folder is not None:
            project = project_from_images(args.image_folder, max_workers=options.max_workers)
        else:
            project = load_project(args.input)

        engine = CameraInitEngine(options=options, sensor_lookup=database.lookup)
        engine.run(project)
        save_project(project, args.output)
    except CameraInitError as e:
        logger.error(str(e))
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
