import logging
from typing import Any

import numpy as np
import spectral.io.envi as envi
from pydantic import Field, PrivateAttr, field_validator

from .Exceptions import SourceOpenFailure
from .FrameSequenceSource import FrameSequenceSource
from .ImageSource import underscore_path
from .PixelBuffer import PixelBuffer

logger = logging.getLogger(__name__)

LAYOUT_KEYS = frozenset({
    "lines", "samples", "bands", "data type", "interleave", "byte order",
    "header offset", "file type", "frames written"
})


class ENVI(FrameSequenceSource):
    """
    ``FrameSequenceSource`` reader for raw frame sequences stored as ENVI.

    Each band of the ENVI cube is one raw CFA frame.  Frames are read one
    at a time with ``spectral`` rather than loading the whole cube, and
    corrected frames are written into a band-sequential output cube next
    to the input, its base name prefixed by ``_``.

    Parameters
    ----------
    filename : str
        Path to the ENVI data file *without* the ``.hdr`` extension.
        The corresponding header is expected at ``filename + '.hdr'``.

    Attributes
    ----------
    metadata : dict
        Populated keys: ``'sensorType'`` (``'ENVI'``), ``'bitDepth'``,
        ``'horizontalRes'``, ``'verticalRes'``, ``'frames'``.

    Raises
    ------
    SourceOpenFailure
        If ``spectral`` cannot open the header/data pair.

    Examples
    --------
    >>> seq = ENVI("/data/M14-1139")
    >>> seq.frame_count()
    240
    >>> seq.output_path
    '/data/_M14-1139'
    """
    filename: str = Field(
        ...,
        description="Path to ENVI image file without the .hdr extension",
        exclude=True
    )

    _image: Any = PrivateAttr(default=None)
    _output: Any = PrivateAttr(default=None)
    _output_header: dict = PrivateAttr(default_factory=dict)

    @field_validator("filename")
    @classmethod
    def validate_filename(cls, v: str):
        if not v or not isinstance(v, str):
            raise ValueError("Filename must be a non-empty string")
        return v

    def __init__(self, filename: str):
        super().__init__(filename=filename,
                         output_path=underscore_path(filename))
        self._read_envi(filename)

    def _read_envi(self, filename: str):
        try:
            image = envi.open(filename + ".hdr", filename)
        except Exception as e:
            raise SourceOpenFailure(f"Failed to open ENVI file: {filename}") from e

        self._image = image
        self.metadata.update({
            "sensorType": "ENVI",
            "frames": int(image.metadata.get("bands", 1)),
            "bitDepth": self.envi_dtype_to_bitdepth(
                image.metadata.get("data type")),
            "horizontalRes": int(image.metadata.get("samples")),
            "verticalRes": int(image.metadata.get("lines")),
        })

    def frame_count(self) -> int:
        return self.metadata["frames"]

    def dimensions(self):
        return self.metadata["horizontalRes"], self.metadata["verticalRes"]

    def read_frame(self, index: int) -> np.ndarray:
        self._check_index(index)
        return np.asarray(self._image.read_band(index))

    def write_frame(self, index: int, buffer: PixelBuffer) -> None:
        """
        Write one corrected frame into the output cube.

        The output cube is created on the first write, so nothing is put
        on disk for a pass that fails before correcting any frame.  The
        header keeps the input header keys and records ``frames written``,
        so a cube from a cancelled pass can be told apart from a full one.
        """
        self._check_index(index)
        frame = buffer.to_array()
        if self._output is None:
            self._output = self._create_output(frame.dtype)
        self._output[:, :, index] = frame
        self._output.flush()
        self.write_order.append(index)

        self._output_header["frames written"] = len(self.write_order)
        envi.write_envi_header(self.output_path + ".hdr", self._output_header)
        logger.debug("Wrote frame %d to %s", index, self.output_path)

    def _create_output(self, dtype):
        width, height = self.dimensions()
        # layout keys are set from the corrected frames instead
        metadata = {
            key: value
            for key, value in self._image.metadata.items()
            if key not in LAYOUT_KEYS
        }
        metadata["frames written"] = 0
        cube = envi.create_image(
            self.output_path + ".hdr",
            metadata,
            shape=(height, width, self.frame_count()),
            dtype=np.dtype(dtype).newbyteorder("="),
            interleave="bsq",
            ext="",
            force=True)
        self._output_header = envi.read_envi_header(self.output_path + ".hdr")
        return cube.open_memmap(writable=True)

    @staticmethod
    def envi_dtype_to_bitdepth(dtype_code: str | None) -> int | None:
        """
        Map an ENVI data-type code to a bit depth integer.

        Returns ``None`` if the code is unrecognised or not provided.
        """
        mapping = {
            "1": 8,
            "2": 16,
            "3": 32,
            "4": 32,
            "5": 64,
            "12": 16,
            "13": 32,
            "14": 64,
            "15": 64,
        }
        return mapping.get(str(dtype_code)) if dtype_code else None
