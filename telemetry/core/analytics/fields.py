"""Field-name resolution for decoded telemetry records.

Device exports are inconsistent about naming ("stroke rate", "stroke_rate",
"STROKE_RATE"), so every read and write of a record field goes through this
module instead of indexing the dict directly.
"""

from enum import Enum
from typing import Any, Dict, List, MutableMapping, Mapping, Optional, Tuple

from ..errors import MissingDataError
from .stats import to_number


class FieldKey(str, Enum):
    """Canonical names of the fields the analytics understand."""
    STROKE_RATE = "stroke_rate"
    WATT = "watt"
    SPEED = "enhanced_speed"
    HEART_RATE = "heart_rate"
    TIME = "timer_time"
    POWER = "power"
    CADENCE = "cadence"


def _spellings(name: str) -> Tuple[str, ...]:
    candidates = [
        name,
        name.replace(' ', '_'),
        name.replace('_', ' '),
        name.lower(),
        name.upper(),
    ]
    seen: List[str] = []
    for candidate in candidates:
        if candidate not in seen:
            seen.append(candidate)
    return tuple(seen)


# canonical key -> accepted spellings, in lookup order
FIELD_VARIANTS: Dict[FieldKey, Tuple[str, ...]] = {
    FieldKey.STROKE_RATE: ("stroke_rate", "stroke rate", "Stroke Rate", "STROKE_RATE", "STROKE RATE"),
    FieldKey.WATT: ("watt", "Watt", "WATT"),
    FieldKey.SPEED: ("enhanced_speed", "enhanced speed", "ENHANCED_SPEED"),
    FieldKey.HEART_RATE: ("heart_rate", "heart rate", "heartRate", "HEART_RATE"),
    FieldKey.TIME: ("timer_time", "timer time", "TIMER_TIME"),
    FieldKey.POWER: ("power", "Power", "POWER"),
    FieldKey.CADENCE: ("cadence", "Cadence", "CADENCE"),
}

_SPELLING_INDEX: Dict[str, FieldKey] = {
    spelling: key
    for key, spellings in FIELD_VARIANTS.items()
    for spelling in spellings
}


def canonical_field(name: str) -> Optional[FieldKey]:
    """Return the ``FieldKey`` a spelling belongs to, or ``None``."""
    if isinstance(name, FieldKey):
        return name
    for spelling in _spellings(name):
        key = _SPELLING_INDEX.get(spelling)
        if key is not None:
            return key
    return None


def field_variants(name: str) -> Tuple[str, ...]:
    """Ordered spellings to try for ``name``.

    The caller's own spelling variants come first, followed by the known
    spellings of the canonical field (if any).
    """
    if isinstance(name, FieldKey):
        name = name.value
    variants = list(_spellings(name))
    key = canonical_field(name)
    if key is not None:
        for spelling in FIELD_VARIANTS[key]:
            if spelling not in variants:
                variants.append(spelling)
    return tuple(variants)


def get_value(record: Mapping[str, Any], name: str) -> Optional[float]:
    """First variant of ``name`` holding a real number; ``None`` otherwise."""
    if not record:
        return None
    for variant in field_variants(name):
        if variant in record:
            value = to_number(record[variant])
            if value is not None:
                return value
    return None


def resolve_key(record: Mapping[str, Any], name: str) -> Optional[str]:
    """The key under which ``record`` stores ``name``, if any."""
    for variant in field_variants(name):
        if variant in record:
            return variant
    return None


def field_name(name: str) -> str:
    return name.value if isinstance(name, FieldKey) else str(name)


def set_value(record: MutableMapping[str, Any], name: str, value: Any) -> None:
    """Write ``value`` under whichever spelling ``record`` already uses."""
    key = resolve_key(record, name)
    if key is None:
        key = field_name(name)
    record[key] = value


def require_value(record: Mapping[str, Any], name: str, index: int = -1) -> float:
    value = get_value(record, name)
    if value is None:
        raise MissingDataError(field_name(name), index)
    return value


def annotation_key(record: Mapping[str, Any], name: str, suffix: str) -> str:
    """``<key>_<suffix>`` where ``<key>`` is the spelling ``record`` stores ``name`` under."""
    return f"{resolve_key(record, name) or field_name(name)}_{suffix}"
