"""Loading JSON Schema documents into reusable validators."""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from jsonschema import Draft4Validator
from jsonschema.exceptions import SchemaError
from jsonschema.protocols import Validator
from jsonschema.validators import validator_for

logger = logging.getLogger(__name__)

BUNDLED_SCHEMA_DIR = Path(__file__).resolve().parent.parent / "schemas"

CREATE_RECORD_SCHEMA = "tgp-create-record-request-v0.7.json"
UPDATE_RECORD_SCHEMA = "tgp-update-record-request-v0.7.json"
PATCH_RECORD_SCHEMA = "tgp-patch-record-request-v0.1.json"
REMOVE_RECORD_SCHEMA = "tgp-remove-record-request-v0.2.json"
CREATE_PROFILE_SCHEMA = "tgp-create-profile-request-v0.1.json"
MAINTAIN_PROFILE_SCHEMA = "tgp-maintain-profile-request-v0.1.json"

REQUEST_SCHEMAS = (
    CREATE_RECORD_SCHEMA,
    UPDATE_RECORD_SCHEMA,
    PATCH_RECORD_SCHEMA,
    REMOVE_RECORD_SCHEMA,
    CREATE_PROFILE_SCHEMA,
    MAINTAIN_PROFILE_SCHEMA,
)


class SchemaNotFoundError(LookupError):
    """Raised when no schema resource exists under the requested name."""


class SchemaMalformedError(ValueError):
    """Raised when a schema resource is not a well-formed JSON Schema document."""


@dataclass(frozen=True)
class SchemaDefinition:
    name: str
    document: dict[str, Any]
    validator: Validator = field(compare=False, repr=False)


def parse_schema(name: str, raw: str | bytes) -> SchemaDefinition:
    """Parse ``raw`` into a ``SchemaDefinition``; draft-04 unless ``$schema`` says otherwise."""
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SchemaMalformedError(f"Schema {name!r} is not UTF-8 text: {exc}") from exc
    try:
        document = json.loads(raw)
    except ValueError as exc:
        raise SchemaMalformedError(f"Schema {name!r} is not valid JSON: {exc}") from exc
    if not isinstance(document, dict):
        raise SchemaMalformedError(f"Schema {name!r} must be a JSON object")
    if not isinstance(document.get("$schema", ""), str):
        raise SchemaMalformedError(f"Schema {name!r} has a non-string $schema")

    validator_cls = validator_for(document, default=Draft4Validator)
    try:
        validator_cls.check_schema(document)
    except SchemaError as exc:
        raise SchemaMalformedError(f"Schema {name!r} is invalid: {exc.message}") from exc

    return SchemaDefinition(
        name=name,
        document=document,
        validator=validator_cls(document, format_checker=validator_cls.FORMAT_CHECKER),
    )


class SchemaRegistry:
    """Resolves schema names against a directory of ``*.json`` resources.

    ``load`` always reads from disk; ``get`` caches the parsed definition for
    the life of the registry.
    """

    def __init__(self, root: Path | None = None) -> None:
        self._root = (root or BUNDLED_SCHEMA_DIR).resolve()
        self._cache: dict[str, SchemaDefinition] = {}
        self._lock = threading.Lock()

    @property
    def root(self) -> Path:
        return self._root

    def _resolve(self, name: str) -> Path:
        path = (self._root / name.lstrip("/")).resolve()
        if not path.is_relative_to(self._root) or not path.is_file():
            raise SchemaNotFoundError(f"No schema named {name!r} under {self._root}")
        return path

    def load(self, name: str) -> SchemaDefinition:
        path = self._resolve(name)
        logger.debug("Loading schema %s from %s", name, path)
        return parse_schema(name, path.read_bytes())

    def get(self, name: str) -> SchemaDefinition:
        cached = self._cache.get(name)
        if cached is not None:
            return cached
        definition = self.load(name)
        with self._lock:
            return self._cache.setdefault(name, definition)

    def preload(self, names: tuple[str, ...] = REQUEST_SCHEMAS) -> None:
        """Load every name eagerly so a missing or broken schema fails at startup."""
        for name in names:
            self.get(name)
        logger.info("Loaded %d request schema(s) from %s", len(names), self._root)

    def names(self) -> list[str]:
        return sorted(str(p.relative_to(self._root)) for p in self._root.rglob("*.json"))
