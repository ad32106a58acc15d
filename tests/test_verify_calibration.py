"""Tests for the calibration verification script."""

import importlib.util
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture(scope="module")
def verify_script():
    """Import scripts/verify_calibration.py as a module."""
    path = PROJECT_ROOT / "scripts" / "verify_calibration.py"
    spec = importlib.util.spec_from_file_location("verify_calibration", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestVerifyCalibration:
    """End-to-end runs of main()."""

    def test_default_config_passes(self, verify_script):
        assert verify_script.main([]) == 0

    def test_calibration_file_passes(self, verify_script):
        argv = ["--calib", str(DATA_DIR / "eucm-cal.json"), "--precision", "float64"]

        assert verify_script.main(argv) == 0

    def test_out_of_fov_calibration_fails(self, verify_script, tmp_path):
        calib = tmp_path / "narrow.yaml"
        calib.write_text("fx: 100\nfy: 100\ncx: 960\ncy: 540\nalpha: 1.0\nbeta: 1.0\n")

        assert verify_script.main(["--calib", str(calib)]) == 1

    def test_missing_calibration_file(self, verify_script, tmp_path):
        assert verify_script.main(["--calib", str(tmp_path / "missing.json")]) == 2

    def test_config_without_calibration(self, verify_script, tmp_path):
        config = tmp_path / "empty.yaml"
        config.write_text("roundtrip:\n  step: 100\n")

        assert verify_script.main(["--config", str(config)]) == 2

    def test_precision_without_tolerance(self, verify_script, tmp_path):
        """A precision with no tolerance entry is a config error, not a crash."""
        config = tmp_path / "half.yaml"
        config.write_text(
            "calibration:\n"
            "  fx: 717.25\n  fy: 716.5\n  cx: 958.5\n  cy: 541.25\n"
            "  alpha: 0.625\n  beta: 1.0625\n"
            "roundtrip:\n"
            "  precisions: [float16]\n"
        )

        assert verify_script.main(["--config", str(config)]) == 2

    def test_overrides(self, verify_script):
        args = verify_script.parse_args(
            ["--width", "640", "--step", "32", "--precision", "float32", "--log_level", "DEBUG"]
        )

        overrides = verify_script.build_overrides(args)

        assert overrides == {
            "roundtrip": {"width": 640, "step": 32, "precisions": ["float32"]},
            "logging": {"level": "DEBUG"},
        }
