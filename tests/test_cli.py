"""Tests for the pinkdot command line."""
import numpy as np
import tifffile

from PinkDotTool import CorrectionConfig, run_correction
from PinkDotTool.cli import main


class TestMain:

    def test_interpolate(self, tmp_path, raw_image, dots_dir):
        path = tmp_path / "IMG_0001.tif"
        tifffile.imwrite(str(path), raw_image)

        code = main([str(path), "--camera", "650D", "--dots-dir",
                     str(dots_dir)])

        assert code == 0
        written = tifffile.imread(str(tmp_path / "_IMG_0001.tif"))
        assert written[50, 50] != raw_image[50, 50]

    def test_mark_bad(self, tmp_path, raw_image, dots_dir):
        path = tmp_path / "IMG_0001.tif"
        tifffile.imwrite(str(path), raw_image)

        code = main([str(path), "--camera", "650D", "--dots-dir",
                     str(dots_dir), "--mark-bad"])

        assert code == 0
        written = tifffile.imread(str(tmp_path / "_IMG_0001.tif"))
        assert written[50, 50] == 0

    def test_unknown_camera(self, tmp_path, raw_image, dots_dir):
        path = tmp_path / "IMG_0001.tif"
        tifffile.imwrite(str(path), raw_image)

        code = main([str(path), "--camera", "5D3", "--dots-dir",
                     str(dots_dir)])

        assert code == 1
        assert not (tmp_path / "_IMG_0001.tif").exists()

    def test_unsupported_input(self, tmp_path):
        assert main([str(tmp_path / "clip.mov"), "--camera", "650D"]) == 1

    def test_missing_dots_dir(self, tmp_path, raw_image):
        path = tmp_path / "IMG_0001.tif"
        tifffile.imwrite(str(path), raw_image)

        code = main([str(path), "--camera", "650D", "--dots-dir",
                     str(tmp_path / "missing")])

        assert code == 1

    def test_malformed_dots_file(self, tmp_path, raw_image):
        """Test a defect file that is not x,y integer rows exits with 1."""
        path = tmp_path / "IMG_0001.tif"
        tifffile.imwrite(str(path), raw_image)
        dots = tmp_path / "dots"
        dots.mkdir()
        (dots / "650D_100x100.csv").write_text("x,y\nfoo,bar\n")

        code = main([str(path), "--camera", "650D", "--dots-dir", str(dots)])

        assert code == 1
        assert not (tmp_path / "_IMG_0001.tif").exists()

    def test_invalid_workers(self, tmp_path, raw_image):
        path = tmp_path / "IMG_0001.tif"
        tifffile.imwrite(str(path), raw_image)
        assert main([str(path), "--camera", "650D", "--workers", "0"]) == 1


class TestRunCorrection:

    def test_loads_dots_directory(self, tmp_path, raw_image, dots_dir):
        path = tmp_path / "IMG_0001.tif"
        tifffile.imwrite(str(path), raw_image)
        config = CorrectionConfig(filename=str(path),
                                  camera_type="650D",
                                  dots_directory=str(dots_dir))

        result = run_correction(config)

        assert result.frame_count == 1
        written = tifffile.imread(result.output_path)
        changed = np.argwhere(written != raw_image)
        assert changed.tolist() == [[50, 50]]
