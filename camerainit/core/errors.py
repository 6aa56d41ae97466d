"""Exception taxonomy for camera initialization runs."""


class CameraInitError(RuntimeError):
    """Base class for errors that abort a camera initialization run."""


class NoViewsError(CameraInitError):
    """No input view could be found."""


class RigStructureError(CameraInitError):
    """Detected rig folders do not describe a consistent rig."""


class IncompleteOutputError(CameraInitError):
    """Too few views have an initialized intrinsic to write the result."""


class ProjectIOError(CameraInitError):
    """A project file could not be read or written."""


class SensorDatabaseError(CameraInitError):
    """The sensor database file is missing or malformed."""


class InvalidIntrinsicStringError(ValueError):
    """A K matrix string is not of the form "f;0;ppx;0;f;ppy;0;0;1"."""
