from pydantic import BaseModel, ConfigDict, field_validator
import numpy as np


class PixelBuffer(BaseModel):
    """
    Read/write view over a single-channel raw CFA grid.

    Pixels are addressed as ``(x, y)`` where ``x`` is the column and ``y``
    the row, so ``get_pixel(x, y)`` reads ``pixels[y, x]``.

    Attributes
    ----------
    pixels : np.ndarray
        2-D array of raw digital counts, shape ``(height, width)``.
    writable : bool
        ``False`` for source buffers owned by a reader.  Writing to a
        read-only buffer raises ``ValueError``.

    Raises
    ------
    IndexError
        From ``get_pixel`` / ``set_pixel`` when the coordinate lies outside
        the grid.  Callers are responsible for filtering coordinates.

    Examples
    --------
    >>> src = PixelBuffer.from_array(raw, writable=False)
    >>> dst = src.copy()
    >>> dst.set_pixel(50, 50, 1234)
    >>> src.get_pixel(50, 50) == raw[50, 50]
    True
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    pixels: np.ndarray
    writable: bool = True

    @field_validator("pixels")
    @classmethod
    def validate_pixels(cls, v: np.ndarray):
        if v.ndim != 2:
            raise ValueError(
                f"Pixel buffer must be 2-D, got shape {v.shape}")
        if v.shape[0] < 1 or v.shape[1] < 1:
            raise ValueError("Pixel buffer must not be empty")
        return v

    @classmethod
    def from_array(cls, array, writable: bool = True) -> "PixelBuffer":
        """
        Wrap an array.  Writable buffers always get their own copy of the
        data; read-only buffers share it.
        """
        array = np.asarray(array)
        if writable:
            array = array.copy()
        return cls(pixels=array, writable=writable)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    def get_pixel(self, x: int, y: int) -> int:
        self._check_bounds(x, y)
        return int(self.pixels[y, x])

    def set_pixel(self, x: int, y: int, value) -> None:
        """
        Store *value* at ``(x, y)``, rounded to the nearest integer and
        clipped to the range of the buffer's dtype.
        """
        if not self.writable:
            raise ValueError("Cannot write to a read-only pixel buffer")
        self._check_bounds(x, y)

        if np.issubdtype(self.pixels.dtype, np.integer):
            limits = np.iinfo(self.pixels.dtype)
            value = np.clip(np.rint(value), limits.min, limits.max)
        self.pixels[y, x] = value

    def copy(self, writable: bool = True) -> "PixelBuffer":
        """Return an independent buffer with the same size and content."""
        return PixelBuffer(pixels=self.pixels.copy(), writable=writable)

    def to_array(self) -> np.ndarray:
        return self.pixels

    def _check_bounds(self, x: int, y: int) -> None:
        # numpy would silently wrap negative indices
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(
                f"Pixel ({x}, {y}) is outside the "
                f"{self.width}x{self.height} buffer")
