from pydantic import BaseModel, Field, field_validator
from typing import Literal

ImageFormat = Literal["tiff", "envi"]


class ImageSourceConfig(BaseModel):
    """
    Configuration for opening one raw image or frame sequence.

    Pass an instance of this class to ``ImageSourceFactory.create_from_file()``.

    Parameters
    ----------
    filename : str
        Path to the input.  For ENVI sequences either the header
        (``*.hdr``) or the data file may be given.
    fileformat : {'tiff', 'envi'}, optional
        Container format.  Default is ``'tiff'``.
    """
    filename: str = Field(..., description="Path to the image file")
    fileformat: ImageFormat = Field(
        default="tiff",
        description="Image file format"
    )

    @field_validator("filename")
    @classmethod
    def validate_filename(cls, v):
        if not isinstance(v, str) or len(v) == 0:
            raise ValueError("Filename must be a non-empty string")
        return v
