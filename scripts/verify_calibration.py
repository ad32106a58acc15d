#!/usr/bin/env python3
"""
EUCM Calibration Round-Trip Verification.

Loads an EUCM calibration (JSON or YAML), unprojects a regular pixel grid,
projects the resulting rays back and reports the pixel error at each requested
precision. Exits with status 1 if any precision exceeds its tolerance.

Usage:
    # Check the calibration referenced by configs/default.yaml
    python scripts/verify_calibration.py

    # Check a calibration file exported by an external tool
    python scripts/verify_calibration.py --calib path/to/eucm-cal.json

    # Custom sensor size, double precision only
    python scripts/verify_calibration.py --calib cam.yaml --width 1280 --height 800 \
        --precision float64
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from eucm_camera.calibration.roundtrip import roundtrip_intrinsics
from eucm_camera.calibration.serialization import (
    CalibrationFormatError,
    load_params,
    params_from_dict,
)
from eucm_camera.utils.config_loader import get_nested, load_config
from eucm_camera.utils.logger import setup_logger


def parse_args(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Verify an EUCM calibration with a project/unproject round trip",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        type=str,
        default=str(PROJECT_ROOT / "configs" / "default.yaml"),
        help="YAML config file (default: configs/default.yaml)",
    )
    parser.add_argument(
        "--calib",
        type=str,
        default=None,
        help="Calibration file (.json/.yaml); overrides the config's calibration",
    )
    parser.add_argument("--width", type=int, default=None, help="Image width in pixels")
    parser.add_argument("--height", type=int, default=None, help="Image height in pixels")
    parser.add_argument("--border", type=int, default=None, help="Excluded border in pixels")
    parser.add_argument("--step", type=int, default=None, help="Grid spacing in pixels")
    parser.add_argument(
        "--precision",
        type=str,
        action="append",
        choices=["float32", "float64"],
        default=None,
        help="Precision to check (repeatable, default: from config)",
    )
    parser.add_argument(
        "--log_level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: from config)",
    )
    return parser.parse_args(argv)


def build_overrides(args) -> Dict[str, Any]:
    """Collect command line values that override the config."""
    roundtrip = {
        key: getattr(args, key)
        for key in ("width", "height", "border", "step")
        if getattr(args, key) is not None
    }
    if args.precision:
        roundtrip["precisions"] = args.precision

    overrides: Dict[str, Any] = {"roundtrip": roundtrip}
    if args.log_level:
        overrides["logging"] = {"level": args.log_level}
    return overrides


def main(argv: Optional[List[str]] = None) -> int:
    """Run the verification."""
    args = parse_args(argv)
    config = load_config(args.config, overrides=build_overrides(args))

    logger = setup_logger(
        "eucm_camera",
        level=get_nested(config, "logging.level", "INFO"),
        log_file=get_nested(config, "logging.file"),
    )

    try:
        if args.calib:
            params = load_params(args.calib)
        else:
            calibration = config.get("calibration")
            if calibration is None:
                logger.error("No calibration given (use --calib or set 'calibration' in the config)")
                return 2
            params = params_from_dict(calibration, numeric_strings=True)
    except (FileNotFoundError, CalibrationFormatError) as e:
        logger.error(f"Could not load calibration: {e}")
        return 2

    rt = config["roundtrip"]
    logger.info(
        f"Checking {params} on a {rt['width']}x{rt['height']} grid "
        f"(border {rt['border']}, step {rt['step']})"
    )

    tolerances = {}
    for precision in rt["precisions"]:
        eps = get_nested(config, f"roundtrip.tolerance.{precision}")
        if eps is None:
            logger.error(
                f"No tolerance for precision '{precision}' "
                f"(set roundtrip.tolerance.{precision} in the config)"
            )
            return 2
        tolerances[precision] = float(eps)

    all_passed = True
    for precision, eps in tolerances.items():
        result = roundtrip_intrinsics(
            params.astype(np.dtype(precision)),
            width=rt["width"],
            height=rt["height"],
            border=rt["border"],
            step=rt["step"],
            eps=eps,
            dtype=np.dtype(precision),
        )

        status = "PASS" if result.passed else "FAIL"
        logger.info(
            f"{precision}: {status} | {result.num_pixels} pixels | "
            f"max {result.max_abs_error:.3e} | mean {result.mean_abs_error:.3e} | "
            f"eps {result.eps:.1e}"
        )
        if not result.passed:
            logger.warning(f"{precision}: worst pixel {result.worst_pixel}")
            all_passed = False

    return 0 if all_passed else 1


if __name__ == "__main__":
    sys.exit(main())
