import os

from .Exceptions import UnsupportedInputFormat
from .ImageSourceConfig import ImageSourceConfig
from .ENVI import ENVI
from .TIFF import TIFF

TIFF_EXTENSIONS = (".tif", ".tiff", ".dng")
ENVI_EXTENSIONS = (".hdr",)


class ImageSourceFactory:
    """
    Factory for creating format-agnostic ``ImageSource`` objects.

    Dispatches to the correct reader (``TIFF``, ``ENVI``) based on the
    ``fileformat`` field of the supplied config.  Callers always receive an
    ``ImageSource`` regardless of the underlying container.

    Methods
    -------
    create_from_file(config)
        Open and return an ``ImageSource``.
    is_valid_image_file(filename, fileformat)
        Return ``True`` if *filename* is a valid file for *fileformat*.
    detect_format(filename)
        Guess the format identifier from the file extension.

    Examples
    --------
    >>> config = ImageSourceConfig(filename="/data/M14-1139.hdr",
    ...                            fileformat="envi")
    >>> seq = ImageSourceFactory.create_from_file(config)
    >>> seq.frame_count()
    240
    """

    @staticmethod
    def create_from_file(config: ImageSourceConfig):
        """
        Open an input file and return an ``ImageSource``.

        Raises
        ------
        UnsupportedInputFormat
            If the file does not match its declared format.
        SourceOpenFailure
            If the reader cannot parse the file.
        """
        fileformat = config.fileformat.lower()

        if not ImageSourceFactory.is_valid_image_file(
            config.filename, fileformat
        ):
            raise UnsupportedInputFormat(
                f"Invalid {fileformat} file: {config.filename}"
            )

        if fileformat == "envi":
            filename = config.filename
            if filename.lower().endswith(".hdr"):
                filename = filename[:-len(".hdr")]
            return ENVI(filename)

        if fileformat == "tiff":
            return TIFF(config.filename)

        raise UnsupportedInputFormat(f"Unsupported file format: {fileformat}")

    @staticmethod
    def is_valid_image_file(filename: str, fileformat: str) -> bool:
        name = filename.lower()
        if fileformat == "tiff":
            return name.endswith(TIFF_EXTENSIONS)
        if fileformat == "envi":
            # header, or a data file with its header beside it
            return (name.endswith(ENVI_EXTENSIONS)
                    or os.path.isfile(filename + ".hdr"))
        return False

    @staticmethod
    def detect_format(filename: str) -> str:
        name = filename.lower()
        if name.endswith(TIFF_EXTENSIONS):
            return "tiff"
        if name.endswith(ENVI_EXTENSIONS) or os.path.isfile(filename + ".hdr"):
            return "envi"
        raise UnsupportedInputFormat(
            f"Cannot determine the container format of {filename}")
