import os
import logging
from typing import Any, List

import numpy as np
import tifffile
from pydantic import Field, PrivateAttr, field_validator

from .Exceptions import SourceOpenFailure, UnsupportedInputFormat
from .ImageSource import underscore_path
from .PixelBuffer import PixelBuffer
from .SingleImageSource import SingleImageSource

logger = logging.getLogger(__name__)

# MINISBLACK, CFA, LINEAR_RAW
RAW_PHOTOMETRIC = (1, 32803, 34892)

# Structure tags generated by tifffile.imwrite, plus ExifIFD/GPSIFD pointers
WRITER_TAGS = frozenset({
    254, 255, 256, 257, 258, 259, 262, 270, 273, 277, 278, 279, 282, 283,
    284, 296, 305, 317, 322, 323, 324, 325, 330, 338, 339, 34665, 34853
})


class TIFF(SingleImageSource):
    """
    ``SingleImageSource`` reader for raw CFA images stored as TIFF or DNG.

    The raw mosaic is the first full-resolution single-channel page or
    SubIFD, so DNG previews in IFD0 are skipped.  The corrected image is
    written next to the input with its base name prefixed by ``_``,
    replacing any existing file of that name, and keeps the photometric
    interpretation and the DNG and CFA tags of the input.

    Parameters
    ----------
    filename : str
        Path to a ``.tif``, ``.tiff`` or ``.dng`` file.

    Attributes
    ----------
    raw_counts : np.ndarray
        2-D array of raw digital counts, shape ``(rows, cols)``.
    metadata : dict
        Populated keys: ``'sensorType'`` (``'TIFF'``), ``'bitDepth'``,
        ``'horizontalRes'``, ``'verticalRes'``, ``'frames'`` (``1``).

    Raises
    ------
    SourceOpenFailure
        If ``tifffile`` cannot read the file.
    UnsupportedInputFormat
        If no page holds a single-channel 2-D image.

    Examples
    --------
    >>> img = TIFF("/data/IMG_0001.dng")
    >>> img.raw_counts.shape
    (3516, 5344)
    >>> img.output_path
    '/data/_IMG_0001.dng'
    """
    filename: str = Field(..., exclude=True)

    _extratags: List[tuple] = PrivateAttr(default_factory=list)
    _photometric: Any = PrivateAttr(default=None)

    @field_validator("filename")
    @classmethod
    def validate_filename(cls, v: str):
        if not v or not isinstance(v, str):
            raise ValueError("Filename must be a non-empty string")
        return v

    def __init__(self, filename: str):
        super().__init__(filename=filename,
                         output_path=underscore_path(filename))
        self._read_tiff(filename)

    def _read_tiff(self, filename: str):
        try:
            with tifffile.TiffFile(filename) as tif:
                page = self.find_raw_page(tif)
                data = page.asarray()
                bitdepth = page.bitspersample
                # DNG-level tags live in IFD0, CFA layout tags on the raw page
                self._extratags = self.copy_tags(tif.pages[0], page)
                self._photometric = page.photometric
        except Exception as e:
            raise SourceOpenFailure(f"Failed to read TIFF file: {filename}") from e

        if data.ndim != 2:
            raise UnsupportedInputFormat(
                f"Expected a single-channel raw image in {filename}, "
                f"got shape {data.shape}")

        self.raw_counts = np.asarray(data)
        self.metadata.update({
            "sensorType": "TIFF",
            "bitDepth": int(bitdepth),
            "horizontalRes": data.shape[1],
            "verticalRes": data.shape[0],
            "frames": 1,
        })

    def write_frame(self, index: int, buffer: PixelBuffer) -> None:
        """
        Write the corrected image to ``output_path``.

        Data goes to a temporary file in the same directory first and is
        moved into place only once it is complete.
        """
        super().write_frame(index, buffer)
        directory, base = os.path.split(self.output_path)
        partial = os.path.join(directory, "." + base + ".partial")
        try:
            tifffile.imwrite(partial,
                             self.corrected,
                             photometric=self._photometric,
                             extratags=self._extratags,
                             metadata=None)
            os.replace(partial, self.output_path)
        finally:
            if os.path.exists(partial):
                os.remove(partial)
        logger.info("Wrote %s", self.output_path)

    @staticmethod
    def find_raw_page(tif):
        """
        Return the full-resolution single-channel page of *tif*.

        DNG files often keep a preview in IFD0 and the raw mosaic in a
        SubIFD, so every page and SubIFD is searched for a main image
        (``subfiletype == 0``) with a raw photometric interpretation.
        Falls back to the first page.
        """
        candidates = []
        for page in tif.pages:
            candidates.append(page)
            if getattr(page, "subifds", None):
                candidates.extend(page.pages)

        for page in candidates:
            if (getattr(page, "subfiletype", 0) == 0
                    and getattr(page, "photometric", None) in RAW_PHOTOMETRIC
                    and getattr(page, "samplesperpixel", 1) == 1):
                return page
        return tif.pages[0]

    @staticmethod
    def copy_tags(*pages):
        """
        Collect tags to carry over to the output as ``extratags``.

        Layout tags that ``tifffile`` writes itself and IFD pointers are
        skipped.  Later pages override earlier ones.
        """
        tags = {}
        for page in pages:
            for tag in page.tags.values():
                if tag.code in WRITER_TAGS or tag.dtype in (13, 18):
                    continue
                if not isinstance(tag.value, (int, float, str, bytes, tuple)):
                    continue
                tags[tag.code] = (tag.code, int(tag.dtype), tag.count,
                                  tag.value, True)
        return list(tags.values())
