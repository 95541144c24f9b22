from typing import Iterable, Optional, Sequence

from .DefectSite import DefectSite
from .PixelBuffer import PixelBuffer

# Sample offsets along each axis; the defect itself (offset 0) is never read
NEIGHBOR_OFFSETS = (-3, -2, -1, 1, 2, 3)
BORDER = 3


def is_border_site(x: int, y: int, width: int, height: int) -> bool:
    """
    Return ``True`` if ``(x, y)`` is too close to the image edge to sample
    every neighbour in ``NEIGHBOR_OFFSETS``.
    """
    return (x < BORDER or x > width - BORDER - 1 or y < BORDER
            or y > height - BORDER - 1)


def normalize_axis(samples: Sequence[float]):
    """
    Collapse six axis samples into a gradient-compensated pair.

    Parameters
    ----------
    samples : sequence of float
        Intensities at offsets ``-3, -2, -1, +1, +2, +3``.

    Returns
    -------
    before, after : float
        ``samples[1] + (samples[2] - samples[0]) / 2`` and
        ``samples[4] + (samples[3] - samples[5]) / 2``.
    """
    before = samples[1] + (samples[2] - samples[0]) / 2.0
    after = samples[4] + (samples[3] - samples[5]) / 2.0
    return before, after


def edge_weights(vertical_diff: float, horizontal_diff: float):
    """
    Weight each axis by how little it changes across the defect.

    An axis with a large before/after discontinuity probably straddles an
    image edge and is weighted down.  When neither axis changes at all the
    two axes are weighted equally.

    Returns
    -------
    vertical_weight, horizontal_weight : float
        Weights summing to ``1``.
    """
    diff_sum = vertical_diff + horizontal_diff
    if diff_sum == 0:
        return 0.5, 0.5
    return 1.0 - vertical_diff / diff_sum, 1.0 - horizontal_diff / diff_sum


def interpolate_site(source: PixelBuffer, site: DefectSite, width: int,
                     height: int) -> Optional[int]:
    """
    Estimate a replacement intensity for one defect site.

    Six same-channel neighbours are sampled along each of the vertical and
    horizontal axes, normalised into a ``before``/``after`` pair per axis and
    blended with edge-direction weights.

    Parameters
    ----------
    source : PixelBuffer
        Unmodified source pixels.  Only read.
    site : DefectSite
        Coordinate to estimate.
    width, height : int
        Image dimensions.

    Returns
    -------
    int or None
        Rounded replacement value, or ``None`` when the site is within
        ``BORDER`` pixels of an edge and must be left untouched.
    """
    x, y = site.x, site.y
    if is_border_site(x, y, width, height):
        return None

    vertical = [source.get_pixel(x, y + d) for d in NEIGHBOR_OFFSETS]
    horizontal = [source.get_pixel(x + d, y) for d in NEIGHBOR_OFFSETS]

    v_before, v_after = normalize_axis(vertical)
    h_before, h_after = normalize_axis(horizontal)

    v_weight, h_weight = edge_weights(abs(v_before - v_after),
                                      abs(h_before - h_after))

    replacement = (v_weight * (v_before + v_after) / 2.0 +
                   h_weight * (h_before + h_after) / 2.0)
    return int(round(replacement))


def interpolate_sites(source: PixelBuffer, destination: PixelBuffer,
                      sites: Iterable[DefectSite]) -> int:
    """
    Interpolate every site from *source* into *destination*.

    Each site is estimated from source pixels only, so the order of *sites*
    does not matter and neighbouring defects are not corrected from each
    other's replacements.

    Returns
    -------
    int
        Number of pixels written (border sites are skipped).
    """
    width, height = source.width, source.height
    written = 0
    for site in sites:
        value = interpolate_site(source, site, width, height)
        if value is None:
            continue
        destination.set_pixel(site.x, site.y, value)
        written += 1
    return written
