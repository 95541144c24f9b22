import os
import threading
from typing import Optional, Tuple

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from .PixelBuffer import PixelBuffer


def underscore_path(filename: str) -> str:
    """Return *filename* with its base name prefixed by ``_``."""
    directory, base = os.path.split(filename)
    return os.path.join(directory, "_" + base)


class ImageSource(BaseModel):
    """
    Source-agnostic container for one raw image or a sequence of frames.

    Subclasses provide frame access and decide where corrected frames go.
    The correction pass only ever talks to this interface, so single
    images and sequences are handled by the same code.

    Attributes
    ----------
    output_path : str or None
        Where corrected data is persisted, or ``None`` for in-memory
        sources.
    metadata : dict
        Sensor and acquisition metadata with the keys ``'sensorType'``,
        ``'bitDepth'``, ``'horizontalRes'``, ``'verticalRes'`` and
        ``'frames'``.

    Methods
    -------
    frame_count()
        Number of frames (``1`` for single images).
    frame(index)
        Read-only source buffer and a private writable copy of it.
    write_frame(index, buffer)
        Persist one fully corrected frame.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    output_path: Optional[str] = None
    metadata: dict = Field(
        default_factory=lambda: {
            'sensorType': 'Unknown',
            'bitDepth': None,
            'horizontalRes': None,
            'verticalRes': None,
            'frames': None,
        })

    _read_lock: threading.Lock = PrivateAttr(default_factory=threading.Lock)

    def frame_count(self) -> int:
        """Number of frames.  Subclasses must override."""
        raise NotImplementedError

    def read_frame(self, index: int) -> np.ndarray:
        """Raw 2-D array of one frame.  Subclasses must override."""
        raise NotImplementedError

    def write_frame(self, index: int, buffer: PixelBuffer) -> None:
        """Persist one corrected frame.  Subclasses must override."""
        raise NotImplementedError

    def dimensions(self) -> Tuple[int, int]:
        """Return ``(width, height)`` of the first frame."""
        rows, cols = np.shape(self.read_frame(0))[:2]
        return int(cols), int(rows)

    def frame(self, index: int) -> Tuple[PixelBuffer, PixelBuffer]:
        """
        Return the ``(source, destination)`` buffer pair for one frame.

        The source buffer is read-only; the destination is an independent
        copy with identical content.
        """
        self._check_index(index)
        with self._read_lock:
            data = self.read_frame(index)
        source = PixelBuffer.from_array(data, writable=False)
        return source, source.copy()

    def _check_index(self, index: int) -> None:
        total = self.frame_count()
        if not 0 <= index < total:
            raise IndexError(f"Frame {index} out of range for {total} frames")
