from typing import Optional

import numpy as np

from .ImageSource import ImageSource
from .PixelBuffer import PixelBuffer


class SingleImageSource(ImageSource):
    """
    ``ImageSource`` holding exactly one raw CFA image.

    Attributes
    ----------
    raw_counts : np.ndarray or None
        2-D array of raw digital counts, shape ``(rows, cols)``.
    corrected : np.ndarray or None
        Corrected image once ``write_frame(0, ...)`` has been called.
    """
    raw_counts: Optional[np.ndarray] = None
    corrected: Optional[np.ndarray] = None

    def frame_count(self) -> int:
        return 1

    def read_frame(self, index: int) -> np.ndarray:
        self._check_index(index)
        return self.raw_counts

    def write_frame(self, index: int, buffer: PixelBuffer) -> None:
        self._check_index(index)
        self.corrected = buffer.to_array()
