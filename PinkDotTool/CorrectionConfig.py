from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Callable, Literal, Optional

from .ImageSourceConfig import ImageFormat

CorrectionMode = Literal["interpolate", "mark_bad"]


class CorrectionConfig(BaseModel):
    """
    Configuration for one pink-dot correction run.

    Pass an instance of this class to ``run_correction()``.

    Parameters
    ----------
    filename : str
        Path to the raw image or frame sequence.
    fileformat : {'tiff', 'envi'}, optional
        Container format.  Default is ``'tiff'``.
    camera_type : str
        Camera identifier used to look up the defect pattern, e.g.
        ``'650D'``.
    mode : {'interpolate', 'mark_bad'}, optional
        Replace defects with an edge-weighted estimate, or set them to ``0``
        for a later stage to handle.  Default is ``'interpolate'``.
    dots_directory : str or None, optional
        Directory of ``<camera>_<width>x<height>.csv`` coordinate files.
        Ignored when a store is passed to ``run_correction()`` directly.
    workers : int, optional
        Number of frames corrected concurrently.  Must be >= 1.
        Default is ``1``.
    progress_cb : callable or None, optional
        Called as ``progress_cb(phase=str, current=int, total=int)`` with
        keyword arguments at the start of the pass, around every frame, and
        on failure.  Default is ``None``.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    filename: str
    fileformat: ImageFormat = "tiff"
    camera_type: str
    mode: CorrectionMode = "interpolate"
    dots_directory: Optional[str] = None
    workers: int = Field(default=1, ge=1)

    progress_cb: Optional[Callable] = None

    @field_validator("camera_type")
    @classmethod
    def validate_camera_type(cls, v):
        if not v.strip():
            raise ValueError("Camera type must be a non-empty string")
        return v.strip()
