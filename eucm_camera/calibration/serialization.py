"""
EUCM Parameter Interchange.

Reads and writes EucmParams as a flat key-value document, the format used to
exchange calibration results with external tools:

    {"fx": 712.5, "fy": 711.9, "cx": 961.3, "cy": 539.8,
     "alpha": 0.62, "beta": 1.04}

JSON and YAML are supported. Values are written with full round-trip
precision, so decoding an encoded document reproduces every field bit for
bit. Pass dtype=np.float32 when decoding parameters that were single
precision.

Documents carry float64 values, so only float16, float32 and float64
parameters can be exchanged. Extended precision (np.longdouble on platforms
where it is wider than float64) is rejected rather than silently rounded.

This module is optional: the core transforms never import it.
"""

import json
from numbers import Real
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import numpy as np
import yaml

from .intrinsics import FIELD_NAMES, EucmParams
from ..utils.logger import get_logger

logger = get_logger(__name__)

FORMATS = ("json", "yaml")

_SUFFIX_FORMATS = {
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
}


class CalibrationFormatError(ValueError):
    """Raised when a calibration document cannot be decoded."""


def _check_precision(dtype) -> np.dtype:
    dtype = np.dtype(dtype)
    if (
        np.issubdtype(dtype, np.floating)
        and np.finfo(dtype).nmant > np.finfo(np.float64).nmant
    ):
        raise ValueError(
            f"Cannot exchange {dtype} parameters: documents hold float64 values "
            f"(use float16, float32 or float64)"
        )
    return dtype


def params_to_dict(params: EucmParams) -> Dict[str, float]:
    """
    Convert parameters to a plain mapping of Python floats.

    Args:
        params: EUCM parameters.

    Returns:
        Dict mapping each field name to its value.

    Raises:
        ValueError: If the parameters are wider than float64.
    """
    _check_precision(params.dtype)
    return {name: float(getattr(params, name)) for name in FIELD_NAMES}


def _to_scalar(name: str, value: Any, numeric_strings: bool) -> float:
    # bool is a Real subclass; true/false in a document is an error
    if isinstance(value, bool):
        raise CalibrationFormatError(f"Field '{name}' must be a number, got {value!r}")

    if isinstance(value, Real):
        return float(value)

    if numeric_strings and isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            pass

    raise CalibrationFormatError(f"Field '{name}' must be a number, got {value!r}")


def params_from_dict(
    data: Mapping[str, Any],
    dtype=None,
    numeric_strings: bool = False,
) -> EucmParams:
    """
    Build parameters from a mapping.

    Args:
        data: Mapping with keys fx, fy, cx, cy, alpha, beta. Other keys are
              ignored.
        dtype: Optional NumPy floating type to cast the values to.
        numeric_strings: Accept strings such as "1e-3" as numbers. YAML 1.1
              loaders resolve exponent floats without a dot to strings.

    Returns:
        EucmParams: Decoded parameters.

    Raises:
        CalibrationFormatError: If data is not a mapping, a key is missing,
            or a value is not numeric.
        ValueError: If dtype is wider than float64.
    """
    if dtype is not None:
        dtype = _check_precision(dtype)

    if not isinstance(data, Mapping):
        raise CalibrationFormatError(
            f"Calibration must be a mapping, got {type(data).__name__}"
        )

    missing = [name for name in FIELD_NAMES if name not in data]
    if missing:
        raise CalibrationFormatError(f"Missing calibration fields: {', '.join(missing)}")

    extra = sorted(str(key) for key in data if key not in FIELD_NAMES)
    if extra:
        logger.debug(f"Ignoring unknown calibration fields: {', '.join(extra)}")

    values = {name: _to_scalar(name, data[name], numeric_strings) for name in FIELD_NAMES}
    params = EucmParams(**values)

    if dtype is not None:
        params = params.astype(dtype)

    return params


def _check_format(fmt: str) -> str:
    fmt = fmt.lower()
    if fmt == "yml":
        fmt = "yaml"
    if fmt not in FORMATS:
        raise ValueError(f"Unknown calibration format: {fmt}. Use one of {FORMATS}")
    return fmt


def dumps(params: EucmParams, fmt: str = "json") -> str:
    """
    Encode parameters as text.

    Args:
        params: EUCM parameters.
        fmt: 'json' or 'yaml'.

    Returns:
        str: Encoded document.

    Raises:
        ValueError: If fmt is unknown or the parameters are wider than float64.
    """
    fmt = _check_format(fmt)
    data = params_to_dict(params)

    if fmt == "json":
        return json.dumps(data, indent=2) + "\n"

    return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)


def loads(text: str, fmt: str = "json", dtype=None) -> EucmParams:
    """
    Decode parameters from text.

    Args:
        text: Encoded document.
        fmt: 'json' or 'yaml'.
        dtype: Optional NumPy floating type to cast the values to.

    Returns:
        EucmParams: Decoded parameters.

    Raises:
        CalibrationFormatError: If the text is malformed or does not describe
            a complete parameter set.
    """
    fmt = _check_format(fmt)

    try:
        if fmt == "json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise CalibrationFormatError(f"Invalid {fmt} calibration: {e}") from e

    return params_from_dict(data, dtype=dtype, numeric_strings=(fmt == "yaml"))


def _format_for_path(path: Path) -> str:
    try:
        return _SUFFIX_FORMATS[path.suffix.lower()]
    except KeyError:
        raise ValueError(
            f"Cannot infer calibration format from suffix '{path.suffix}' "
            f"(expected one of {sorted(_SUFFIX_FORMATS)})"
        ) from None


def save_params(
    params: EucmParams,
    path: Union[str, Path],
    fmt: Optional[str] = None,
) -> Path:
    """
    Write parameters to a file.

    Args:
        params: EUCM parameters.
        path: Output file path.
        fmt: Format override. Inferred from the suffix if None.

    Returns:
        Path: The written file.
    """
    path = Path(path)
    fmt = _check_format(fmt) if fmt else _format_for_path(path)

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps(params, fmt), encoding="utf-8")

    logger.info(f"Saved EUCM calibration to {path}")
    return path


def load_params(
    path: Union[str, Path],
    fmt: Optional[str] = None,
    dtype=None,
) -> EucmParams:
    """
    Read parameters from a file.

    Args:
        path: Calibration file (.json, .yaml or .yml).
        fmt: Format override. Inferred from the suffix if None.
        dtype: Optional NumPy floating type to cast the values to.

    Returns:
        EucmParams: Decoded parameters.

    Raises:
        FileNotFoundError: If the file does not exist.
        CalibrationFormatError: If the contents cannot be decoded.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Calibration file not found: {path}")

    fmt = _check_format(fmt) if fmt else _format_for_path(path)
    params = loads(path.read_text(encoding="utf-8"), fmt, dtype=dtype)

    logger.info(f"Loaded EUCM calibration from {path}: {params}")
    return params
