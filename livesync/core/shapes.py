"""Value shape descriptions and their validation.

A shape describes the structure expected at any point of an entity. The set of
variants is closed:

- AnyShape: accepts every value and every nested path
- PrimitiveShape: string, number, integer, boolean
- LiteralShape / EnumShape: fixed values
- ObjectShape: named fields, each possibly wrapped in Optional/Default
- ArrayShape: homogeneous elements
- RecordShape: keyed map with homogeneous values
- UnionShape: variants, optionally discriminated by a literal field
- OptionalShape / DefaultShape: wrappers around an inner shape

Path resolution (see ``resolve.py``) walks these variants directly. Validation
compiles a shape once into a pydantic ``TypeAdapter``; the validated value is
dumped back to plain dicts and lists, keeping only the keys present in the
input plus the ones filled from defaults.
"""

from __future__ import annotations

import copy
import functools
import keyword
from dataclasses import dataclass, field
from typing import Annotated, Any, Callable, Dict, List, Literal, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    TypeAdapter,
    ValidationError,
    create_model,
    model_validator,
)

from .types import LiveSyncError


class ShapeValidationError(LiveSyncError):
    """Raised by ``parse`` when a value does not satisfy its shape."""

    def __init__(self, message: str, shape: "Shape", errors: Optional[list] = None):
        super().__init__(message)
        self.shape = shape
        self.errors = errors or []

    def __str__(self) -> str:
        return f"ShapeValidationError({describe(self.shape)}): {self.args[0]}"


# =============================================================================
# Shape variants
# =============================================================================

# eq=False keeps identity hashing, compiled adapters are cached per shape object


@dataclass(frozen=True, eq=False)
class AnyShape:
    pass


@dataclass(frozen=True, eq=False)
class PrimitiveShape:
    kind: str  # "string" | "number" | "integer" | "boolean"


@dataclass(frozen=True, eq=False)
class LiteralShape:
    value: Any


@dataclass(frozen=True, eq=False)
class EnumShape:
    values: Tuple[Any, ...]


@dataclass(frozen=True, eq=False)
class ObjectShape:
    name: str
    fields: Dict[str, "Shape"] = field(default_factory=dict)


@dataclass(frozen=True, eq=False)
class ArrayShape:
    element: "Shape"


@dataclass(frozen=True, eq=False)
class RecordShape:
    value: "Shape"


@dataclass(frozen=True, eq=False)
class UnionShape:
    variants: Tuple["Shape", ...]
    discriminator: Optional[str] = None


@dataclass(frozen=True, eq=False)
class OptionalShape:
    inner: "Shape"


@dataclass(frozen=True, eq=False)
class DefaultShape:
    inner: "Shape"
    factory: Callable[[], Any]


Shape = Union[
    AnyShape,
    PrimitiveShape,
    LiteralShape,
    EnumShape,
    ObjectShape,
    ArrayShape,
    RecordShape,
    UnionShape,
    OptionalShape,
    DefaultShape,
]

_WRAPPERS = (OptionalShape, DefaultShape)


# =============================================================================
# Builders
# =============================================================================

ANY = AnyShape()
STRING = PrimitiveShape("string")
NUMBER = PrimitiveShape("number")
INTEGER = PrimitiveShape("integer")
BOOLEAN = PrimitiveShape("boolean")


def literal(value: Any) -> LiteralShape:
    return LiteralShape(value)


def enum(*values: Any) -> EnumShape:
    return EnumShape(tuple(values))


def obj(name: str, fields: Dict[str, Shape]) -> ObjectShape:
    return ObjectShape(name, dict(fields))


def array(element: Shape) -> ArrayShape:
    return ArrayShape(element)


def record(value: Shape) -> RecordShape:
    return RecordShape(value)


def union(*variants: Shape, discriminator: Optional[str] = None) -> UnionShape:
    return UnionShape(tuple(variants), discriminator)


def optional(inner: Shape) -> OptionalShape:
    return OptionalShape(inner)


def default(
    inner: Shape,
    value: Any = None,
    *,
    factory: Optional[Callable[[], Any]] = None,
) -> DefaultShape:
    """Wrap ``inner`` with a default. Constant values are deep-copied per use."""
    if factory is None:
        return DefaultShape(inner, lambda: copy.deepcopy(value))
    return DefaultShape(inner, factory)


def unwrap(shape: Shape) -> Shape:
    """Strip Optional and Default wrappers until a non-wrapper shape is reached."""
    while isinstance(shape, _WRAPPERS):
        shape = shape.inner
    return shape


def describe(shape: Shape) -> str:
    if isinstance(shape, ObjectShape):
        return f"object:{shape.name}"
    if isinstance(shape, PrimitiveShape):
        return shape.kind
    if isinstance(shape, _WRAPPERS):
        return describe(shape.inner)
    return type(shape).__name__


# =============================================================================
# Compilation to pydantic
# =============================================================================

_PRIMITIVES: Dict[str, Any] = {
    "string": StrictStr,
    "number": Union[StrictInt, StrictFloat],
    "integer": StrictInt,
    "boolean": StrictBool,
}


class _ShapeModel(BaseModel):
    """Base for generated object models: unknown keys are dropped."""

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _fill_defaults(cls, data: Any) -> Any:
        # Defaults become explicit input so they survive exclude_unset dumps
        if not isinstance(data, dict):
            return data
        filled = dict(data)
        for name, info in cls.model_fields.items():
            key = info.alias or name
            if key not in filled and info.default_factory is not None:
                filled[key] = info.default_factory()
        return filled


def _python_name(key: str, position: int) -> str:
    if (
        key.isidentifier()
        and not keyword.iskeyword(key)
        and not key.startswith(("_", "model_"))
        and not hasattr(BaseModel, key)
    ):
        return key
    return f"field_{position}"


def _model_name(name: str) -> str:
    cleaned = "".join(ch for ch in name.title() if ch.isalnum())
    return cleaned or "Shape"


@functools.lru_cache(maxsize=None)
def _annotation(shape: Shape) -> Any:
    if isinstance(shape, AnyShape):
        return Any
    if isinstance(shape, PrimitiveShape):
        return _PRIMITIVES[shape.kind]
    if isinstance(shape, LiteralShape):
        return Literal[shape.value]  # type: ignore[valid-type]
    if isinstance(shape, EnumShape):
        return Literal[shape.values]  # type: ignore[valid-type]
    if isinstance(shape, ArrayShape):
        return List[_annotation(shape.element)]  # type: ignore[misc]
    if isinstance(shape, RecordShape):
        return Dict[str, _annotation(shape.value)]  # type: ignore[misc]
    if isinstance(shape, UnionShape):
        variants = tuple(_annotation(v) for v in shape.variants)
        if len(variants) == 1:
            return variants[0]
        combined = Union[variants]  # type: ignore[valid-type]
        if shape.discriminator:
            return Annotated[combined, Field(discriminator=shape.discriminator)]
        return combined
    if isinstance(shape, OptionalShape):
        return Optional[_annotation(shape.inner)]
    if isinstance(shape, DefaultShape):
        return _annotation(shape.inner)
    if isinstance(shape, ObjectShape):
        return _object_model(shape)
    raise TypeError(f"Unknown shape variant: {shape!r}")


def _object_model(shape: ObjectShape) -> type:
    definitions: Dict[str, Any] = {}
    for position, (key, field_shape) in enumerate(shape.fields.items()):
        name = _python_name(key, position)
        options: Dict[str, Any] = {"alias": key} if name != key else {}
        if isinstance(field_shape, OptionalShape):
            options["default"] = None
        elif isinstance(field_shape, DefaultShape):
            options["default_factory"] = field_shape.factory
        definitions[name] = (_annotation(unwrap(field_shape)), Field(**options))
    return create_model(_model_name(shape.name), __base__=_ShapeModel, **definitions)


@functools.lru_cache(maxsize=None)
def _adapter(shape: Shape) -> TypeAdapter:
    return TypeAdapter(_annotation(shape))


# =============================================================================
# Parsing
# =============================================================================


@dataclass(frozen=True)
class ParseResult:
    """Outcome of ``safe_parse``: either a value or the validation errors."""

    success: bool
    value: Any = None
    errors: Tuple[Dict[str, Any], ...] = ()


def safe_parse(shape: Shape, value: Any) -> ParseResult:
    """Validate ``value`` against ``shape`` without raising."""
    adapter = _adapter(shape)
    try:
        validated = adapter.validate_python(value)
    except ValidationError as exc:
        return ParseResult(success=False, errors=tuple(exc.errors()))
    return ParseResult(
        success=True,
        value=adapter.dump_python(validated, by_alias=True, exclude_unset=True),
    )


def parse(shape: Shape, value: Any) -> Any:
    """Validate ``value`` against ``shape`` and return the parsed value.

    Raises:
        ShapeValidationError: If the value does not satisfy the shape
    """
    result = safe_parse(shape, value)
    if not result.success:
        first = result.errors[0]["msg"] if result.errors else "invalid value"
        raise ShapeValidationError(first, shape, list(result.errors))
    return result.value
