"""Partial-update support shared by every resource service."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable, Dict, Mapping, Tuple, TypeVar

T = TypeVar("T")

# Maps a wire key to the entity attribute it updates and the validator that
# normalises the incoming value. Validators take (raw_value, field_name).
FieldSpec = Tuple[str, Callable[[object, str], Any]]
FieldSet = Mapping[str, FieldSpec]


def apply_patch(entity: T, patch: Mapping[str, object], fields: FieldSet) -> T:
    """Return a copy of ``entity`` with the non-null patch values in ``fields`` applied.

    Keys outside ``fields`` (``id`` included) are ignored, as are keys whose
    value is ``None``; every applied value goes through its field validator.
    """
    changes: Dict[str, Any] = {}
    for key, (attribute, validate) in fields.items():
        value = patch.get(key)
        if value is None:
            continue
        changes[attribute] = validate(value, key)
    if not changes:
        return entity
    return replace(entity, **changes)  # type: ignore[type-var]
