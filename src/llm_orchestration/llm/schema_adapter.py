"""
Per-vendor schema adapters.

Callers describe the expected output with a plain JSON Schema. Each vendor
accepts only a dialect of it:

- Strict-mode family (OpenAI structured outputs): every property required,
  additionalProperties false on every object, no patternProperties, no
  minItems/maxItems, and an object at the root.
- Schema-stripping family (Gemini responseSchema): no $schema, no
  additionalProperties, no optional markers, every property required.

Every transform works on a deep copy; the caller's schema is never mutated.
"""

import copy
from enum import Enum
from typing import Any, NamedTuple


# Synthetic root property used to wrap non-object schemas for strict mode
RESULTS_KEY = "___results"

GEMINI_STRIPPED_KEYS = ("$schema", "additionalProperties", "optional")
STRICT_STRIPPED_OBJECT_KEYS = ("patternProperties",)
STRICT_STRIPPED_ARRAY_KEYS = ("minItems", "maxItems")


class SchemaKind(str, Enum):
    """Node kinds of a JSON Schema tree."""

    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    OBJECT = "object"
    ARRAY = "array"
    UNKNOWN = "unknown"  # anyOf/oneOf/$ref or untyped nodes


_TYPE_TO_KIND = {
    "null": SchemaKind.NULL,
    "boolean": SchemaKind.BOOLEAN,
    "number": SchemaKind.NUMBER,
    "integer": SchemaKind.NUMBER,
    "string": SchemaKind.STRING,
    "object": SchemaKind.OBJECT,
    "array": SchemaKind.ARRAY,
}


def classify(node: Any) -> SchemaKind:
    """
    Determine the kind of a schema node.

    A type list (e.g. ["string", "null"]) classifies by its first non-null
    member. Untyped nodes fall back to structural hints: ``properties``
    means object, ``items`` means array.
    """
    if not isinstance(node, dict):
        return SchemaKind.UNKNOWN

    declared = node.get("type")
    if isinstance(declared, list):
        non_null = [t for t in declared if t != "null"]
        declared = non_null[0] if non_null else "null"

    if isinstance(declared, str):
        kind = _TYPE_TO_KIND.get(declared.lower())
        if kind is not None:
            return kind

    if isinstance(node.get("properties"), dict):
        return SchemaKind.OBJECT
    if isinstance(node.get("items"), dict):
        return SchemaKind.ARRAY
    return SchemaKind.UNKNOWN


class AdaptedSchema(NamedTuple):
    """A vendor-compliant schema and whether its root was wrapped."""

    schema: dict[str, Any]
    wrapped: bool


# === Nullable widening ===

def add_nullable_to_optional(schema: dict[str, Any]) -> dict[str, Any]:
    """
    Turn optional properties into required-but-nullable ones.

    Strict-mode vendors cannot omit a property, so a property that is not
    listed in ``required`` (or carries ``optional: true``) gets ``"null"``
    added to its type, and every property becomes required.

    Returns:
        A new schema; the input is left untouched.
    """
    return _widen_optional(copy.deepcopy(schema))


def _widen_optional(node: Any) -> Any:
    kind = classify(node)

    if kind is SchemaKind.OBJECT and isinstance(node.get("properties"), dict):
        required = set(node.get("required") or [])
        for name, prop in node["properties"].items():
            if not isinstance(prop, dict):
                continue
            marked_optional = prop.pop("optional", False) is True
            optional = marked_optional or name not in required
            _widen_optional(prop)
            if optional:
                _add_null_type(prop)
        node["required"] = list(node["properties"])
    elif kind is SchemaKind.ARRAY:
        _widen_optional(node.get("items"))
    elif kind is SchemaKind.UNKNOWN and isinstance(node, dict):
        for variant in node.get("anyOf") or []:
            _widen_optional(variant)

    return node


def _add_null_type(node: dict[str, Any]) -> None:
    declared = node.get("type")
    if declared is None:
        return
    if isinstance(declared, list):
        if "null" not in declared:
            node["type"] = [*declared, "null"]
    elif declared != "null":
        node["type"] = [declared, "null"]


# === Strict-mode family ===

def enforce_strict_schema(schema: dict[str, Any]) -> AdaptedSchema:
    """
    Adapt a schema to strict structured-output mode.

    Non-object roots are wrapped as ``{"type": "object", "properties":
    {RESULTS_KEY: <schema>}}``; use unwrap_result() on the parsed reply.
    """
    node = copy.deepcopy(schema)
    wrapped = classify(node) is not SchemaKind.OBJECT
    if wrapped:
        node = {"type": "object", "properties": {RESULTS_KEY: node}}

    _strictify(node)
    return AdaptedSchema(schema=node, wrapped=wrapped)


def _strictify(node: Any) -> None:
    kind = classify(node)

    if kind is SchemaKind.OBJECT:
        node["additionalProperties"] = False
        for key in STRICT_STRIPPED_OBJECT_KEYS:
            node.pop(key, None)
        properties = node.setdefault("properties", {})
        node["required"] = list(properties)
        for prop in properties.values():
            _strictify(prop)
    elif kind is SchemaKind.ARRAY:
        for key in STRICT_STRIPPED_ARRAY_KEYS:
            node.pop(key, None)
        _strictify(node.get("items"))
    elif kind is SchemaKind.UNKNOWN and isinstance(node, dict):
        for variant in node.get("anyOf") or []:
            _strictify(variant)


def unwrap_result(value: Any, wrapped: bool) -> Any:
    """Undo the synthetic root wrapping of enforce_strict_schema()."""
    if wrapped and isinstance(value, dict) and RESULTS_KEY in value:
        return value[RESULTS_KEY]
    return value


# === Schema-stripping family ===

def clean_schema_for_gemini(schema: dict[str, Any]) -> dict[str, Any]:
    """
    Strip meta fields and mark every property required, recursively.

    Returns:
        A new schema; the input is left untouched.
    """
    return _strip(copy.deepcopy(schema))


def _strip(node: Any) -> Any:
    if not isinstance(node, dict):
        return node

    for key in GEMINI_STRIPPED_KEYS:
        node.pop(key, None)

    kind = classify(node)
    if kind is SchemaKind.OBJECT:
        properties = node.get("properties")
        if isinstance(properties, dict):
            node["required"] = list(properties)
            for prop in properties.values():
                _strip(prop)
    elif kind is SchemaKind.ARRAY:
        _strip(node.get("items"))

    return node
