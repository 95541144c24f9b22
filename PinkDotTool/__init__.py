# PinkDotTool/__init__.py

from .PixelBuffer import PixelBuffer
from .DefectSite import DefectSite
from .DefectPatternStore import DefectPatternStore
from .AdaptiveInterpolator import interpolate_site, interpolate_sites
from .BadPixelMarker import mark_sites

from .ImageSource import ImageSource
from .SingleImageSource import SingleImageSource
from .FrameSequenceSource import FrameSequenceSource
from .TIFF import TIFF
from .ENVI import ENVI
from .ImageSourceFactory import ImageSourceFactory
from .ImageSourceConfig import ImageSourceConfig

from .CorrectionConfig import CorrectionConfig
from .CorrectionOrchestrator import CorrectionResult, correct, run_correction
from .Exceptions import (PinkDotError, UnknownDefectPattern,
                         UnsupportedInputFormat, SourceOpenFailure,
                         CorrectionCancelled)

__all__ = [
    "PixelBuffer", "DefectSite", "DefectPatternStore", "interpolate_site",
    "interpolate_sites", "mark_sites", "ImageSource", "SingleImageSource",
    "FrameSequenceSource", "TIFF", "ENVI", "ImageSourceFactory",
    "ImageSourceConfig", "CorrectionConfig", "CorrectionResult", "correct",
    "run_correction", "PinkDotError", "UnknownDefectPattern",
    "UnsupportedInputFormat", "SourceOpenFailure", "CorrectionCancelled"
]
