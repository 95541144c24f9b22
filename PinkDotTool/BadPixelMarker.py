from typing import Iterable

from .DefectSite import DefectSite
from .PixelBuffer import PixelBuffer

# Value downstream demosaicing treats as a bad pixel
BAD_PIXEL_VALUE = 0


def mark_sites(destination: PixelBuffer, sites: Iterable[DefectSite]) -> int:
    """
    Flag every in-bounds defect site as bad.

    Sites outside the buffer are skipped.  Source intensities are never
    consulted, so running this twice gives the same result as running it
    once.

    Returns
    -------
    int
        Number of pixels marked.
    """
    width, height = destination.width, destination.height
    marked = 0
    for site in sites:
        if 0 <= site.x < width and 0 <= site.y < height:
            destination.set_pixel(site.x, site.y, BAD_PIXEL_VALUE)
            marked += 1
    return marked
