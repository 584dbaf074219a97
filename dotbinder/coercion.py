"""
Date: 2026-10-18
Description:

Turn one raw leaf string into a typed scalar when its name asks for it.

Names follow Hungarian notation: a one-letter type code followed by an upper
case letter (iAge, bActive, tBirth). Anything else, or anything that fails to
convert, is kept as the raw string. Coercion never raises to the caller.
"""

import logging
import math
import struct
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, List, Mapping, Optional

from dotbinder.config import CoercionSettings
from dotbinder.exceptions import CastError
from dotbinder.metrics import COERCION_FALLBACKS

logger = logging.getLogger(__name__)

Caster = Callable[[str, CoercionSettings], Any]

_INT32 = 32
_INT64 = 64

_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


def _parse_bool(v: str) -> bool:
    v_lc = v.strip().lower()
    if v_lc in _TRUE:
        return True
    if v_lc in _FALSE:
        return False
    raise ValueError(f"Invalid boolean literal '{v}'")


def _parse_int(v: str, bits: Optional[int] = None) -> int:
    n = int(v)
    if bits is not None:
        bound = 1 << (bits - 1)
        if not -bound <= n < bound:
            raise OverflowError(f"{n} does not fit in {bits} bits")
    return n


def _parse_single(v: str) -> float:
    # round-trip through a C float to get single precision
    value = float(v)
    single = struct.unpack("f", struct.pack("f", value))[0]
    if math.isinf(single) and not math.isinf(value):
        raise OverflowError(f"{v} does not fit in a single precision float")
    return single


def _parse_decimal(v: str) -> Decimal:
    d = Decimal(v.strip())
    if not d.is_finite():
        raise ValueError(f"Decimal '{v}' is not finite")
    return d


def _parse_datetime(v: str, formats: List[str]) -> datetime:
    """
    Parse *v* as ISO-8601 first, then with each strptime format in order.
    Raises:
        ValueError: If no format matches.
    """
    v = v.strip()
    try:
        return datetime.fromisoformat(v)
    except ValueError:
        pass
    for fmt in formats:
        try:
            return datetime.strptime(v, fmt)
        except ValueError:
            continue
    raise ValueError(f"'{v}' matches neither ISO-8601 nor any of {formats}")


def _parse_instant(v: str, cfg: CoercionSettings) -> datetime:
    dt = _parse_datetime(v, cfg.date_formats)
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def _parse_calendar(v: str, cfg: CoercionSettings) -> datetime:
    dt = _parse_datetime(v, cfg.date_formats)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


# lookup table → one entry per Hungarian type code
DEFAULT_CASTERS: Dict[str, Caster] = {
    "i": lambda v, cfg: _parse_int(v, _INT32),
    "l": lambda v, cfg: _parse_int(v, _INT64),
    "d": lambda v, cfg: float(v),
    "f": lambda v, cfg: _parse_single(v),
    "r": lambda v, cfg: _parse_decimal(v),
    "x": lambda v, cfg: _parse_int(v),
    "b": lambda v, cfg: _parse_bool(v),
    "t": _parse_instant,
    "c": _parse_calendar,
}


class LeafCoercer:
    """
    Converts leaf values according to the naming convention of their last path segment.
    The code → caster table can be swapped per instance.
    """

    def __init__(
            self,
            settings: Optional[CoercionSettings] = None,
            casters: Optional[Mapping[str, Caster]] = None,
    ):
        self.settings = settings or CoercionSettings()
        self._casters = dict(DEFAULT_CASTERS if casters is None else casters)
        logger.debug("LeafCoercer initialized with codes: %s", sorted(self._casters))

    def code_for(self, segment: str) -> Optional[str]:
        """
        Return the type code *segment* declares, or None when it does not follow the convention.
        """
        if not self.settings.enabled or len(segment) < 2:
            return None
        code, marker = segment[0], segment[1]
        if code in self._casters and "A" <= marker <= "Z":
            return code
        return None

    def key_for(self, segment: str) -> str:
        """
        Key under which the leaf named *segment* is stored: iAge → age when prefixes are stripped.
        """
        if self.settings.strip_prefix and self.code_for(segment) is not None:
            return segment[1].lower() + segment[2:]
        return segment

    def _cast(self, code: str, raw: str) -> Any:
        caster = self._casters[code]
        try:
            return caster(raw, self.settings)
        except (ValueError, TypeError, ArithmeticError, struct.error) as e:
            raise CastError(f"Failed casting '{raw}' → '{code}'") from e

    def coerce(self, segment: str, raw: str) -> Any:
        """
        Convert *raw* to the scalar type *segment* asks for.
        Args:
            segment (str): Last path segment of the parameter name.
            raw (str): Raw submitted value.
        Returns:
            Any: The typed value, or *raw* unchanged when the name does not
            follow the convention or the conversion fails.
        """
        code = self.code_for(segment)
        if code is None:
            return raw
        try:
            return self._cast(code, raw)
        except CastError as e:
            logger.debug("Keeping '%s' as text: %s", segment, e)
            COERCION_FALLBACKS.inc()
            return raw


_default_coercer = LeafCoercer()


def coerce(segment: str, raw: str) -> Any:
    """Coerce with the default settings and caster table."""
    return _default_coercer.coerce(segment, raw)
