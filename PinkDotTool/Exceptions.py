class PinkDotError(Exception):
    """Base class for every failure raised by a correction pass."""


class UnknownDefectPattern(PinkDotError, LookupError):
    """
    No defect pattern is registered for a camera type and resolution.

    Attributes
    ----------
    camera_type : str
        Camera identifier that was looked up.
    width, height : int
        Image dimensions that were looked up.
    """

    def __init__(self, camera_type: str, width: int, height: int):
        super().__init__(
            f"No defect pattern registered for camera {camera_type!r} "
            f"at {width}x{height}")
        self.camera_type = camera_type
        self.width = width
        self.height = height


class UnsupportedInputFormat(PinkDotError, ValueError):
    """The input is neither a single-image nor a frame-sequence container."""


class SourceOpenFailure(PinkDotError, RuntimeError):
    """A recognised input could not be opened or parsed."""


class CorrectionCancelled(PinkDotError):
    """The cancel event was set before every frame had been corrected."""

    def __init__(self, frames_written: int, total: int):
        super().__init__(
            f"Correction cancelled after {frames_written} of {total} frames")
        self.frames_written = frames_written
        self.total = total
