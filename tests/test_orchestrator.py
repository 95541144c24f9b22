"""Tests for the correction pass over images and frame sequences."""
import threading

import numpy as np
import pytest

from PinkDotTool import (
    CorrectionCancelled,
    DefectPatternStore,
    FrameSequenceSource,
    SingleImageSource,
    UnknownDefectPattern,
    correct,
)


class TestSingleImage:

    def test_only_defect_pixel_changes(self, raw_image, store_650d):
        """Test the 650D 100x100 scenario changes exactly one pixel."""
        original = raw_image.copy()
        source = SingleImageSource(raw_counts=raw_image)

        result = correct(source, "650D", "interpolate", store_650d)

        changed = np.argwhere(source.corrected != original)
        assert changed.tolist() == [[50, 50]]
        assert source.corrected[50, 50] < 5000
        np.testing.assert_array_equal(raw_image, original)
        assert result.frame_count == 1
        assert result.site_count == 1
        assert result.corrected_per_frame == [1]
        assert (result.width, result.height) == (100, 100)

    def test_mark_bad(self, raw_image, store_650d):
        source = SingleImageSource(raw_counts=raw_image)

        correct(source, "650D", "mark_bad", store_650d)

        assert source.corrected[50, 50] == 0
        mask = np.ones_like(raw_image, dtype=bool)
        mask[50, 50] = False
        np.testing.assert_array_equal(source.corrected[mask], raw_image[mask])

    def test_unknown_pattern_writes_nothing(self, raw_image):
        """Test an unregistered camera fails before any output exists."""
        source = SingleImageSource(raw_counts=raw_image)

        with pytest.raises(UnknownDefectPattern) as exc_info:
            correct(source, "650D", "interpolate", DefectPatternStore())

        assert source.corrected is None
        assert exc_info.value.camera_type == "650D"
        assert (exc_info.value.width, exc_info.value.height) == (100, 100)

    def test_unregistered_resolution(self, store_650d):
        source = SingleImageSource(raw_counts=np.ones((80, 100),
                                                      dtype=np.uint16))
        with pytest.raises(UnknownDefectPattern):
            correct(source, "650D", "interpolate", store_650d)
        assert source.corrected is None

    def test_border_sites_untouched(self, raw_image):
        store = DefectPatternStore()
        store.register("650D", 100, 100, [(1, 1), (98, 50)])
        source = SingleImageSource(raw_counts=raw_image)

        result = correct(source, "650D", "interpolate", store)

        np.testing.assert_array_equal(source.corrected, raw_image)
        assert result.corrected_per_frame == [0]

    def test_invalid_mode(self, raw_image, store_650d):
        source = SingleImageSource(raw_counts=raw_image)
        with pytest.raises(ValueError):
            correct(source, "650D", "median", store_650d)


class TestFrameSequence:

    def test_frames_written_in_order(self, raw_stack, store_650d):
        """Test three frames give three writes in index order."""
        source = FrameSequenceSource(image_stack=raw_stack)

        result = correct(source, "650D", "interpolate", store_650d)

        assert source.write_order == [0, 1, 2]
        assert result.frame_count == 3
        assert result.corrected_per_frame == [1, 1, 1]

    def test_each_frame_from_its_own_source(self, raw_stack, store_650d):
        """Test a sequence frame matches correcting that frame alone."""
        sequence = FrameSequenceSource(image_stack=raw_stack)
        correct(sequence, "650D", "interpolate", store_650d)

        for index in range(3):
            single = SingleImageSource(raw_counts=raw_stack[:, :, index])
            correct(single, "650D", "interpolate", store_650d)
            np.testing.assert_array_equal(sequence.corrected[:, :, index],
                                          single.corrected)

    def test_parallel_matches_sequential(self, store_650d):
        stack = np.stack([
            np.random.default_rng(i).integers(0, 4000, (100, 100),
                                              dtype=np.uint16)
            for i in range(5)
        ], axis=2)
        sequential = FrameSequenceSource(image_stack=stack)
        parallel = FrameSequenceSource(image_stack=stack)

        correct(sequential, "650D", "interpolate", store_650d)
        correct(parallel, "650D", "interpolate", store_650d, workers=3)

        assert parallel.write_order == [0, 1, 2, 3, 4]
        np.testing.assert_array_equal(parallel.corrected, sequential.corrected)


class TestProgressAndCancel:

    def test_progress_phases(self, raw_stack, store_650d):
        calls = []

        def progress_cb(phase, current, total):
            calls.append((phase, current, total))

        correct(FrameSequenceSource(image_stack=raw_stack), "650D",
                "interpolate", store_650d, progress_cb=progress_cb)

        assert calls == [
            ("start", 0, 3),
            ("frame_start", 0, 3), ("frame_end", 1, 3),
            ("frame_start", 1, 3), ("frame_end", 2, 3),
            ("frame_start", 2, 3), ("frame_end", 3, 3),
        ]

    def test_progress_passed_by_keyword(self, raw_image, store_650d):
        calls = []

        def progress_cb(*, phase, current, total):
            calls.append(phase)

        correct(SingleImageSource(raw_counts=raw_image), "650D",
                "interpolate", store_650d, progress_cb=progress_cb)

        assert calls == ["start", "frame_start", "frame_end"]

    def test_failure_reported(self, raw_image):
        phases = []
        source = SingleImageSource(raw_counts=raw_image)

        with pytest.raises(UnknownDefectPattern):
            correct(source, "650D", "interpolate", DefectPatternStore(),
                    progress_cb=lambda phase, current, total: phases.append(phase))

        assert phases == ["failed"]

    def test_cancel_before_start(self, raw_stack, store_650d):
        cancel = threading.Event()
        cancel.set()
        source = FrameSequenceSource(image_stack=raw_stack)

        with pytest.raises(CorrectionCancelled):
            correct(source, "650D", "interpolate", store_650d,
                    cancel_event=cancel)

        assert source.write_order == []

    def test_cancel_between_frames(self, raw_stack, store_650d):
        """Test cancelling stops before the next frame starts."""
        cancel = threading.Event()

        def progress_cb(phase, current, total):
            if phase == "frame_end":
                cancel.set()

        source = FrameSequenceSource(image_stack=raw_stack)
        with pytest.raises(CorrectionCancelled) as exc_info:
            correct(source, "650D", "interpolate", store_650d,
                    progress_cb=progress_cb, cancel_event=cancel)

        assert source.write_order == [0]
        assert exc_info.value.frames_written == 1
