from typing import List, Optional

import numpy as np
from pydantic import Field

from .ImageSource import ImageSource
from .PixelBuffer import PixelBuffer


class FrameSequenceSource(ImageSource):
    """
    ``ImageSource`` holding an ordered sequence of raw frames.

    Frames share one resolution and are stacked along the last axis.

    Attributes
    ----------
    image_stack : np.ndarray or None
        3-D array of frames, shape ``(rows, cols, num_frames)``.
    corrected : np.ndarray or None
        Stack of corrected frames, allocated on the first write.
    write_order : list of int
        Frame indices in the order they were written.
    """
    image_stack: Optional[np.ndarray] = None
    corrected: Optional[np.ndarray] = None
    write_order: List[int] = Field(default_factory=list)

    def frame_count(self) -> int:
        return int(self.image_stack.shape[2])

    def read_frame(self, index: int) -> np.ndarray:
        self._check_index(index)
        return self.image_stack[:, :, index]

    def write_frame(self, index: int, buffer: PixelBuffer) -> None:
        self._check_index(index)
        if self.corrected is None:
            self.corrected = np.zeros_like(self.image_stack)
        self.corrected[:, :, index] = buffer.to_array()
        self.write_order.append(index)
