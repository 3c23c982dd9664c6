"""Tests for resolver selection, the resolver variants, and ResolverRegistry."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from typing import Any, Optional

import pytest

from structtags.domain.errors import ConversionError, GrammarError, UnsupportedKindError
from structtags.domain.fields import FieldDescriptor
from structtags.domain.kinds import Int8, PrimitiveKind
from structtags.domain.resolvers import (
    NAME_KEY,
    BoolResolver,
    CustomResolver,
    DefaultResolver,
    DurationResolver,
    ListResolver,
    NameResolver,
    PointerResolver,
    ResolverRegistry,
    build_resolver,
    custom_hook,
    optional_inner,
)

FIELD = FieldDescriptor(name="UserName", ordinal=0)


class Color:
    def __init__(self, name: str) -> None:
        self.name = name

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Color) and other.name == self.name

    def __hash__(self) -> int:
        return hash(self.name)

    @classmethod
    def resolve_tag_option(cls, field: FieldDescriptor, value: str) -> Color:
        if value not in ("red", "green"):
            raise ValueError(f"unknown color {value!r}")
        return cls(value)


def _decimal_hook(field: FieldDescriptor, value: str) -> Decimal:
    return Decimal(value)


def _other_hook(field: FieldDescriptor, value: str) -> Any:
    return "other"


class TestBuildResolver:
    @pytest.mark.parametrize(
        "annotation,expected",
        [
            (str, DefaultResolver(PrimitiveKind.STRING)),
            (Int8, DefaultResolver(PrimitiveKind.INT8)),
            (float, DefaultResolver(PrimitiveKind.FLOAT64)),
            (bool, BoolResolver("k")),
            (timedelta, DurationResolver()),
            (int | None, PointerResolver(DefaultResolver(PrimitiveKind.INT))),
            (Optional[str], PointerResolver(DefaultResolver(PrimitiveKind.STRING))),
            (list[int], ListResolver(DefaultResolver(PrimitiveKind.INT))),
            (list[bool], ListResolver(BoolResolver("k"))),
            (
                list[Int8 | None],
                ListResolver(PointerResolver(DefaultResolver(PrimitiveKind.INT8))),
            ),
            (list[timedelta], ListResolver(DurationResolver())),
        ],
    )
    def test_variant_selection(self, annotation: Any, expected: Any) -> None:
        assert build_resolver(annotation, "k") == expected

    def test_name_key_wraps_inner(self) -> None:
        assert build_resolver(str, NAME_KEY) == NameResolver(
            DefaultResolver(PrimitiveKind.STRING)
        )

    def test_custom_capability(self) -> None:
        resolver = build_resolver(Color, "c")
        assert resolver == CustomResolver(Color.resolve_tag_option)

    def test_optional_custom_is_pointer(self) -> None:
        resolver = build_resolver(Color | None, "c")
        assert resolver == PointerResolver(CustomResolver(Color.resolve_tag_option))

    def test_registry_hook(self) -> None:
        registry = ResolverRegistry({Decimal: _decimal_hook})
        assert build_resolver(Decimal, "d", registry=registry) == CustomResolver(_decimal_hook)

    def test_own_capability_beats_registry(self) -> None:
        registry = ResolverRegistry({Color: _other_hook})
        assert custom_hook(Color, registry) == Color.resolve_tag_option

    @pytest.mark.parametrize(
        "annotation",
        [list[list[int]], dict[str, int], tuple[int, int], Decimal, bytes, int | str],
    )
    def test_unsupported(self, annotation: Any) -> None:
        with pytest.raises(UnsupportedKindError) as exc_info:
            build_resolver(annotation, "k", field_name="Opt")
        assert exc_info.value.field_name == "Opt"


class TestResolvers:
    def test_default(self) -> None:
        assert DefaultResolver(PrimitiveKind.UINT8).resolve(FIELD, "200") == 200

    def test_default_conversion_error(self) -> None:
        with pytest.raises(ConversionError):
            DefaultResolver(PrimitiveKind.UINT8).resolve(FIELD, "300")

    def test_bool_bare_flag(self) -> None:
        assert BoolResolver("omitempty").resolve(FIELD, "omitempty") is True

    def test_bool_explicit_false(self) -> None:
        assert BoolResolver("omitempty").resolve(FIELD, "false") is False

    def test_bool_invalid(self) -> None:
        with pytest.raises(ConversionError):
            BoolResolver("omitempty").resolve(FIELD, "maybe")

    def test_pointer_holds_inner_value(self) -> None:
        assert PointerResolver(DefaultResolver(PrimitiveKind.INT)).resolve(FIELD, "7") == 7

    def test_list(self) -> None:
        resolver = ListResolver(DefaultResolver(PrimitiveKind.INT))
        assert resolver.resolve(FIELD, "1,2,3") == [1, 2, 3]

    def test_list_of_quoted_strings(self) -> None:
        resolver = ListResolver(DefaultResolver(PrimitiveKind.STRING))
        assert resolver.resolve(FIELD, "'a,b',c") == ["a,b", "c"]

    def test_list_empty_body(self) -> None:
        resolver = ListResolver(DefaultResolver(PrimitiveKind.INT))
        assert resolver.resolve(FIELD, "") == []

    def test_list_bad_element(self) -> None:
        resolver = ListResolver(DefaultResolver(PrimitiveKind.INT))
        with pytest.raises(ConversionError):
            resolver.resolve(FIELD, "1,x")

    def test_list_grammar_error(self) -> None:
        resolver = ListResolver(DefaultResolver(PrimitiveKind.STRING))
        with pytest.raises(GrammarError):
            resolver.resolve(FIELD, "'open")

    def test_duration(self) -> None:
        assert DurationResolver().resolve(FIELD, "90s") == timedelta(seconds=90)

    def test_name_falls_back_to_field_name(self) -> None:
        resolver = NameResolver(DefaultResolver(PrimitiveKind.STRING))
        assert resolver.resolve(FIELD, "") == "UserName"

    def test_name_explicit(self) -> None:
        resolver = NameResolver(DefaultResolver(PrimitiveKind.STRING))
        assert resolver.resolve(FIELD, "customName") == "customName"

    def test_custom_receives_field_and_value(self) -> None:
        seen: list[tuple[str, str]] = []

        def hook(field: FieldDescriptor, value: str) -> int:
            seen.append((field.name, value))
            return len(value)

        assert CustomResolver(hook).resolve(FIELD, "abc") == 3
        assert seen == [("UserName", "abc")]

    def test_custom_error_propagates(self) -> None:
        with pytest.raises(ValueError, match="unknown color"):
            CustomResolver(Color.resolve_tag_option).resolve(FIELD, "blue")


class TestOptionalInner:
    def test_pipe_union(self) -> None:
        assert optional_inner(int | None) is int

    def test_typing_optional(self) -> None:
        assert optional_inner(Optional[str]) is str

    def test_wider_union(self) -> None:
        assert optional_inner(int | str | None) is None

    def test_not_a_union(self) -> None:
        assert optional_inner(int) is None


class TestResolverRegistry:
    def test_register_and_lookup(self) -> None:
        registry = ResolverRegistry()
        registry.register(Decimal, _decimal_hook)
        assert registry.lookup(Decimal) is _decimal_hook
        assert Decimal in registry
        assert len(registry) == 1
        assert list(registry) == [Decimal]

    def test_duplicate_rejected(self) -> None:
        registry = ResolverRegistry({Decimal: _decimal_hook})
        with pytest.raises(ValueError, match="already registered"):
            registry.register(Decimal, _other_hook)

    def test_replace(self) -> None:
        registry = ResolverRegistry({Decimal: _decimal_hook})
        registry.register(Decimal, _other_hook, replace=True)
        assert registry.lookup(Decimal) is _other_hook

    def test_lookup_is_exact_type(self) -> None:
        class SubDecimal(Decimal):
            pass

        registry = ResolverRegistry({Decimal: _decimal_hook})
        assert registry.lookup(SubDecimal) is None

    def test_unhashable_lookup(self) -> None:
        assert ResolverRegistry().lookup([]) is None
