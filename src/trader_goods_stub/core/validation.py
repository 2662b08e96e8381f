"""Schema validation with flattened, location-normalised error reporting.

Violations reported by ``jsonschema`` are first turned into an explicit tree:

* ``LeafViolation`` -- a single failed constraint at one instance location;
* ``CompositeViolation`` -- a violation explained by zero or more sub-violations
  (``anyOf``/``oneOf`` failures, or the synthetic root when several
  constraints fail at once).

``flatten`` then walks the tree with a worklist and emits only the leaves, so
callers receive the most specific failures and never the enclosing composite.
"""

from __future__ import annotations

import re
from collections import deque
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from jsonschema.exceptions import ValidationError as SchemaViolation

from trader_goods_stub.core.schemas import SchemaDefinition

ROOT_POINTER = "#"


@dataclass(frozen=True)
class ValidationError:
    location: str
    message: str


@dataclass(frozen=True)
class LeafViolation:
    pointer: str
    message: str


@dataclass(frozen=True)
class CompositeViolation:
    pointer: str
    message: str
    children: tuple[Violation, ...] = ()


Violation = LeafViolation | CompositeViolation


def format_pointer(pointer: str) -> str:
    """Rewrite a ``#/a/b`` pointer into the ``$.a.b`` location convention."""
    return re.sub(r"^#", "$", pointer).replace("/", ".")


def to_pointer(path: Iterable[str | int]) -> str:
    return ROOT_POINTER + "".join(f"/{segment}" for segment in path)


def _path_key(error: SchemaViolation) -> tuple[tuple[bool, Any], ...]:
    # (is_str, value) keeps array indices numeric and never compares int with str
    return tuple((isinstance(segment, str), segment) for segment in error.absolute_path)


def _sorted(errors: Iterable[SchemaViolation]) -> list[SchemaViolation]:
    return sorted(errors, key=_path_key)


def _to_violation(error: SchemaViolation) -> Violation:
    pointer = to_pointer(error.absolute_path)
    if error.context:
        children = tuple(_to_violation(child) for child in _sorted(error.context))
        return CompositeViolation(pointer=pointer, message=error.message, children=children)
    return LeafViolation(pointer=pointer, message=error.message)


def violation_tree(schema: SchemaDefinition, document: Any) -> Violation | None:
    """Return the violation tree for ``document`` or ``None`` when it is valid."""
    errors = _sorted(schema.validator.iter_errors(document))
    if not errors:
        return None
    if len(errors) == 1:
        return _to_violation(errors[0])
    return CompositeViolation(
        pointer=ROOT_POINTER,
        message=f"{len(errors)} schema violations found",
        children=tuple(_to_violation(error) for error in errors),
    )


def flatten(root: Violation) -> list[ValidationError]:
    """Collect every leaf of ``root`` in depth-first, left-to-right order."""
    leaves: list[ValidationError] = []
    pending: deque[Violation] = deque([root])
    while pending:
        violation = pending.popleft()
        if isinstance(violation, CompositeViolation) and violation.children:
            pending.extendleft(reversed(violation.children))
        else:
            leaves.append(ValidationError(format_pointer(violation.pointer), violation.message))
    return leaves


def validate(schema: SchemaDefinition, document: Any) -> list[ValidationError]:
    """Validate ``document`` against ``schema``; an empty list means it conforms.

    Non-conforming documents never raise. Errors raised by ``jsonschema``
    itself (for example an unresolvable ``$ref``) propagate unchanged.
    """
    tree = violation_tree(schema, document)
    if tree is None:
        return []
    return flatten(tree)


def count_leaves(root: Violation) -> int:
    if isinstance(root, CompositeViolation) and root.children:
        return sum(count_leaves(child) for child in root.children)
    return 1


def format_errors(errors: Sequence[ValidationError]) -> list[str]:
    return [f"{error.location}: {error.message}" for error in errors]
