"""
JSON value codec for stored flag payloads.

Values are a closed JSON model: None, bool, int, float, str, lists and
string-keyed mappings of those. They are stored as JSON text and decoded
losslessly on read. A payload that is not valid JSON is returned unchanged
as a string with a DecodeWarning.
"""

from __future__ import annotations

import json
import logging
import math
import warnings
from typing import Any, Dict, List, Optional, Union

from featureflags.core.exceptions import DecodeWarning, FeatureValidationError

logger = logging.getLogger(__name__)

JSONValue = Union[None, bool, int, float, str, List["JSONValue"], Dict[str, "JSONValue"]]


def validate_value(value: Any, path: str = "$") -> None:
    """Raise FeatureValidationError unless value fits the JSON model."""
    if value is None or isinstance(value, (bool, int, str)):
        return
    if isinstance(value, float):
        if not math.isfinite(value):
            raise FeatureValidationError(
                f"Non-finite number at {path} cannot be stored",
                details={"path": path},
            )
        return
    if isinstance(value, (list, tuple)):
        for i, item in enumerate(value):
            validate_value(item, f"{path}[{i}]")
        return
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise FeatureValidationError(
                    f"Mapping key at {path} must be a string, got {type(key).__name__}",
                    details={"path": path},
                )
            validate_value(item, f"{path}.{key}")
        return
    raise FeatureValidationError(
        f"Unsupported value type at {path}: {type(value).__name__}",
        details={"path": path, "type": type(value).__name__},
    )


def encode_value(value: JSONValue) -> Optional[str]:
    """Encode a value for storage. None stays None (SQL NULL)."""
    if value is None:
        return None
    validate_value(value)
    return json.dumps(value, ensure_ascii=False, allow_nan=False, separators=(",", ":"))


def decode_value(raw: Optional[str]) -> JSONValue:
    """Decode a stored payload, passing undecodable text through unchanged."""
    if raw is None or raw == "":
        return None
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning(f"Stored value is not valid JSON, returning raw string: {raw[:80]!r}")
        warnings.warn(
            f"Stored value is not valid JSON: {raw[:80]!r}",
            DecodeWarning,
            stacklevel=2,
        )
        return raw


def _reject_constant(token: str) -> float:
    raise ValueError(f"Non-finite constant {token} is not a storable number")


def parse_cli_value(raw: Optional[str]) -> JSONValue:
    """
    Interpret a user-supplied string as JSON, else keep it as a plain string.

    NaN and Infinity are not storable numbers, so they stay strings too.
    """
    if raw is None:
        return None
    try:
        return json.loads(raw, parse_constant=_reject_constant)
    except ValueError:
        return raw
