"""structtags — declarative field annotations decoded into typed option records."""

from structtags.domain.compiler import DecodingPlan, PlanCompiler, compile_plan
from structtags.domain.decoder import FieldTag, decode, parse_tags
from structtags.domain.errors import (
    ConversionError,
    DuplicateKeyError,
    GrammarError,
    InvalidShapeError,
    MissingRequiredOptionsError,
    SchemaError,
    TagError,
    UnsupportedKindError,
)
from structtags.domain.fields import FieldDescriptor, Shape, describe, tag
from structtags.domain.kinds import (
    Complex64,
    Complex128,
    Float32,
    Float64,
    Int8,
    Int16,
    Int32,
    Int64,
    PrimitiveKind,
    Uint,
    Uint8,
    Uint16,
    Uint32,
    Uint64,
)
from structtags.domain.resolvers import ResolverRegistry
from structtags.domain.tokenizer import Token, tokenize
from structtags.infrastructure.cache import TagCache

__version__ = "0.1.0"

__all__ = [
    "Complex64",
    "Complex128",
    "ConversionError",
    "DecodingPlan",
    "DuplicateKeyError",
    "FieldDescriptor",
    "FieldTag",
    "Float32",
    "Float64",
    "GrammarError",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "InvalidShapeError",
    "MissingRequiredOptionsError",
    "PlanCompiler",
    "PrimitiveKind",
    "ResolverRegistry",
    "SchemaError",
    "Shape",
    "TagCache",
    "TagError",
    "Token",
    "Uint",
    "Uint8",
    "Uint16",
    "Uint32",
    "Uint64",
    "UnsupportedKindError",
    "__version__",
    "compile_plan",
    "decode",
    "describe",
    "parse_tags",
    "tag",
    "tokenize",
]
