import logging
import threading
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Sequence

from pydantic import BaseModel, Field

from .AdaptiveInterpolator import interpolate_sites
from .BadPixelMarker import mark_sites
from .CorrectionConfig import CorrectionConfig
from .DefectPatternStore import DefectPatternStore
from .DefectSite import DefectSite
from .Exceptions import CorrectionCancelled, UnknownDefectPattern
from .ImageSource import ImageSource
from .ImageSourceConfig import ImageSourceConfig
from .ImageSourceFactory import ImageSourceFactory

logger = logging.getLogger(__name__)

CORRECTION_MODES = ("interpolate", "mark_bad")


class CorrectionResult(BaseModel):
    """
    Summary of a completed correction pass.

    Attributes
    ----------
    camera_type : str
        Camera identifier the defect pattern was looked up with.
    mode : str
        ``'interpolate'`` or ``'mark_bad'``.
    width, height : int
        Resolution of every frame.
    frame_count : int
        Number of frames corrected and written.
    site_count : int
        Number of defect sites in the pattern.
    corrected_per_frame : list of int
        Pixels rewritten in each frame, in frame order.  Interpolation skips
        border sites, so this can be lower than ``site_count``.
    output_path : str or None
        Where the corrected data went, ``None`` for in-memory sources.
    """
    camera_type: str
    mode: str
    width: int
    height: int
    frame_count: int = 0
    site_count: int = 0
    corrected_per_frame: List[int] = Field(default_factory=list)
    output_path: Optional[str] = None


def correct_frame(image_source: ImageSource, index: int,
                  sites: Sequence[DefectSite], mode: str):
    """
    Correct one frame into a fresh destination buffer.

    Returns
    -------
    destination : PixelBuffer
        Corrected copy of the frame.  The source frame is not modified.
    corrected : int
        Number of pixels rewritten.
    """
    source, destination = image_source.frame(index)
    if mode == "interpolate":
        corrected = interpolate_sites(source, destination, sites)
    else:
        corrected = mark_sites(destination, sites)
    return destination, corrected


def correct(image_source: ImageSource,
            camera_type: str,
            mode: str,
            store: DefectPatternStore,
            progress_cb: Optional[Callable] = None,
            workers: int = 1,
            cancel_event: Optional[threading.Event] = None) -> CorrectionResult:
    """
    Run one correction pass over every frame of *image_source*.

    The defect pattern is resolved once from the dimensions of the first
    frame and reused for every frame.  Frames are written in index order,
    each as soon as it is corrected.

    Parameters
    ----------
    image_source : ImageSource
        Single image or frame sequence to correct.
    camera_type : str
        Camera identifier passed to the defect lookup.
    mode : {'interpolate', 'mark_bad'}
        Correction strategy applied to every site of every frame.
    store : DefectPatternStore
        Defect coordinate lookup.
    progress_cb : callable or None, optional
        Called as ``progress_cb(phase=..., current=..., total=...)`` with
        the phases ``'start'``, ``'frame_start'``, ``'frame_end'`` and
        ``'failed'``.
    workers : int, optional
        Frames corrected concurrently.  Writes stay in index order.
    cancel_event : threading.Event or None, optional
        Checked before each frame; once set, no further frames are started.

    Returns
    -------
    CorrectionResult

    Raises
    ------
    UnknownDefectPattern
        If *store* has no pattern for the camera and resolution.  Raised
        before any frame is corrected or written.
    CorrectionCancelled
        If *cancel_event* was set before the last frame was started.
    """
    if mode not in CORRECTION_MODES:
        raise ValueError(f"Unsupported correction mode: {mode}")
    if workers < 1:
        raise ValueError("workers must be >= 1")

    width, height = image_source.dimensions()
    total = image_source.frame_count()

    sites = store.get_all_dots(camera_type, width, height)
    if sites is None:
        logger.error("No defect pattern for %s at %dx%d", camera_type, width,
                     height)
        _notify(progress_cb, "failed", 0, total)
        raise UnknownDefectPattern(camera_type, width, height)

    logger.info("Correcting %d frame(s) of %dx%d for %s: %d sites, mode=%s",
                total, width, height, camera_type, len(sites), mode)
    _notify(progress_cb, "start", 0, total)

    result = CorrectionResult(camera_type=camera_type,
                              mode=mode,
                              width=width,
                              height=height,
                              site_count=len(sites),
                              output_path=image_source.output_path)
    try:
        if workers == 1:
            _run_sequential(image_source, sites, mode, total, result,
                            progress_cb, cancel_event)
        else:
            _run_parallel(image_source, sites, mode, total, result,
                          progress_cb, cancel_event, workers)
    except Exception:
        _notify(progress_cb, "failed", result.frame_count, total)
        raise

    logger.info("Corrected %d frame(s)", result.frame_count)
    return result


def run_correction(config: CorrectionConfig,
                   store: Optional[DefectPatternStore] = None,
                   cancel_event: Optional[threading.Event] = None
                   ) -> CorrectionResult:
    """
    Open the input named by *config* and correct it.

    When *store* is ``None`` the patterns are loaded from
    ``config.dots_directory``; with neither, every lookup fails with
    ``UnknownDefectPattern``.
    """
    if store is None:
        if config.dots_directory:
            store = DefectPatternStore.from_directory(config.dots_directory)
        else:
            store = DefectPatternStore()

    image_source = ImageSourceFactory.create_from_file(
        ImageSourceConfig(filename=config.filename,
                          fileformat=config.fileformat))
    return correct(image_source,
                   config.camera_type,
                   config.mode,
                   store,
                   progress_cb=config.progress_cb,
                   workers=config.workers,
                   cancel_event=cancel_event)


def _run_sequential(image_source, sites, mode, total, result, progress_cb,
                    cancel_event):
    for index in range(total):
        _raise_if_cancelled(cancel_event, result.frame_count, total)
        _notify(progress_cb, "frame_start", index, total)
        destination, corrected = correct_frame(image_source, index, sites,
                                               mode)
        _write(image_source, index, destination, corrected, result)
        _notify(progress_cb, "frame_end", index + 1, total)


def _run_parallel(image_source, sites, mode, total, result, progress_cb,
                  cancel_event, workers):
    pending = deque()
    next_index = 0
    with ThreadPoolExecutor(max_workers=workers) as executor:
        while next_index < total or pending:
            while next_index < total and len(pending) < workers:
                _raise_if_cancelled(cancel_event, result.frame_count, total)
                _notify(progress_cb, "frame_start", next_index, total)
                future = executor.submit(correct_frame, image_source,
                                         next_index, sites, mode)
                pending.append((next_index, future))
                next_index += 1

            index, future = pending.popleft()
            destination, corrected = future.result()
            _write(image_source, index, destination, corrected, result)
            _notify(progress_cb, "frame_end", index + 1, total)


def _write(image_source, index, destination, corrected, result):
    image_source.write_frame(index, destination)
    result.corrected_per_frame.append(corrected)
    result.frame_count += 1
    logger.debug("Frame %d: %d pixels corrected", index, corrected)


def _raise_if_cancelled(cancel_event, frames_written, total):
    if cancel_event is not None and cancel_event.is_set():
        logger.warning("Correction cancelled after %d of %d frames",
                       frames_written, total)
        raise CorrectionCancelled(frames_written, total)


def _notify(progress_cb, phase, current, total):
    if progress_cb:
        progress_cb(phase=phase, current=current, total=total)
