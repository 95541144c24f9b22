"""Command line entry point for pink dot removal.

Usage::

    pinkdot IMG_0001.dng --camera 650D --dots-dir ./dots
    pinkdot M14-1139.hdr --camera 650D --dots-dir ./dots --mark-bad --workers 4
"""

import argparse
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from .CorrectionConfig import CorrectionConfig
from .CorrectionOrchestrator import run_correction
from .Exceptions import PinkDotError
from .ImageSourceFactory import ImageSourceFactory

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pinkdot",
        description="Remove focus-pixel pink dots from raw CFA images and "
                    "frame sequences.")
    parser.add_argument("filename", help="Raw image (.dng/.tif) or ENVI "
                                         "sequence header (.hdr)")
    parser.add_argument("--camera", required=True,
                        help="Camera identifier, e.g. 650D")
    parser.add_argument("--format", choices=["tiff", "envi"], default=None,
                        help="Container format (default: from extension)")
    parser.add_argument("--mark-bad", action="store_true",
                        help="Set defects to 0 instead of interpolating")
    parser.add_argument("--dots-dir", default=None,
                        help="Directory of <camera>_<w>x<h>.csv defect files")
    parser.add_argument("--workers", type=int, default=1,
                        help="Frames corrected concurrently (default: 1)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        fileformat = args.format or ImageSourceFactory.detect_format(
            args.filename)
        config = CorrectionConfig(
            filename=args.filename,
            fileformat=fileformat,
            camera_type=args.camera,
            mode="mark_bad" if args.mark_bad else "interpolate",
            dots_directory=args.dots_dir,
            workers=args.workers)
        result = run_correction(config)
    except PinkDotError as e:
        logger.error("%s", e)
        return 1
    except ValidationError as e:
        logger.error("Invalid arguments: %s", e)
        return 1

    logger.info("Wrote %d frame(s) to %s", result.frame_count,
                result.output_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
