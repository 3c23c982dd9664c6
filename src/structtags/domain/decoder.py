"""Tag decoder — applies a DecodingPlan to every field of a subject shape.

Failure policy per option:
- required option fails to resolve -> the error propagates immediately
- optional option fails to resolve -> ignored, the slot keeps its default
- required option never satisfied -> MissingRequiredOptionsError (all keys)
- malformed quoting/bracketing -> GrammarError, always propagated (list
  bodies included)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from structtags.domain.compiler import compile_plan
from structtags.domain.errors import (
    ConversionError,
    GrammarError,
    MissingRequiredOptionsError,
    TagError,
)
from structtags.domain.fields import describe
from structtags.domain.resolvers import NAME_KEY
from structtags.domain.tokenizer import Token, tokenize

if TYPE_CHECKING:
    from structtags.domain.compiler import DecodingPlan
    from structtags.domain.fields import FieldDescriptor
    from structtags.domain.resolvers import ResolverRegistry

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class FieldTag(Generic[T]):
    """Decoded options of one subject field.

    Attributes:
        field_name: Name of the subject field the options apply to.
        field_index: Declaration index of that field.
        value: Instance of the option shape.
    """

    field_name: str
    field_index: int
    value: T


def effective_key(plan: DecodingPlan, index: int, token: Token) -> str:
    """Key a token is looked up under.

    Position 0 is the name when the plan has a ``$name`` option, even if
    the entry spells an explicit key. A bare word is its own key.
    """
    if index == 0 and plan.has_name:
        return NAME_KEY
    if token.key is None:
        return token.value
    return token.key


def decode_field(plan: DecodingPlan, field: FieldDescriptor, raw: str) -> Any:
    """Decode one raw annotation into an instance of the plan's option shape.

    Raises:
        GrammarError: If *raw* is malformed.
        ConversionError: If a required option fails to resolve.
        MissingRequiredOptionsError: If required keys are absent.
    """
    values = plan.new_values()
    satisfied: set[str] = set()

    for index, token in enumerate(tokenize(raw)):
        key = effective_key(plan, index, token)
        option = plan.options.get(key)
        if option is None:
            continue
        try:
            value = option.resolver.resolve(field, token.value)
        except GrammarError:
            raise
        except TagError as exc:
            if option.required:
                raise
            logger.debug("Ignoring option %r on field %r: %s", key, field.name, exc)
            continue
        except Exception as exc:
            # custom hooks may raise anything
            if option.required:
                raise ConversionError(token.value, key, str(exc)) from exc
            logger.debug("Ignoring option %r on field %r: %s", key, field.name, exc)
            continue
        values[option.field_name] = value
        if option.required:
            satisfied.add(key)

    missing = plan.required_keys - satisfied
    if missing:
        raise MissingRequiredOptionsError(field.name, missing)
    return plan.build(values)


def decode(plan: DecodingPlan, subject: Any, tag_name: str) -> tuple[FieldTag[Any], ...]:
    """Decode the *tag_name* annotation of every exported field of *subject*.

    Records keep the subject's declaration order; fields without an
    annotation still get a record holding default option values.
    """
    table = describe(subject)
    records: list[FieldTag[Any]] = []
    for descriptor in table.fields:
        if not descriptor.exported or descriptor.embedded:
            continue
        value = decode_field(plan, descriptor, descriptor.raw_tag(tag_name))
        records.append(
            FieldTag(field_name=descriptor.name, field_index=descriptor.ordinal, value=value)
        )
    logger.debug("Decoded %d fields of %s for tag %r", len(records), table.name, tag_name)
    return tuple(records)


def parse_tags(
    option_shape: Any,
    subject: Any,
    tag_name: str,
    *,
    registry: ResolverRegistry | None = None,
) -> tuple[FieldTag[Any], ...]:
    """Compile *option_shape* and decode *subject* in one call."""
    return decode(compile_plan(option_shape, registry=registry), subject, tag_name)
