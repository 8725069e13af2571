import collections.abc
import datetime
import decimal
import enum
import types
import typing
import uuid

T = typing.TypeVar("T")


def assert_not_none(value: typing.Optional[T]) -> T:
    assert value is not None
    return value


_union_types: typing.Tuple[typing.Any, ...] = (typing.Union,)
if hasattr(types, "UnionType"):
    _union_types += (types.UnionType,)


def strip_annotated(hint: typing.Any) -> typing.Tuple[typing.Any, typing.Sequence[typing.Any]]:
    """
    Splits ``Annotated[T, m1, m2]`` into ``T`` and ``(m1, m2)``.
    Hints that carry no metadata are returned as they are.
    """
    if typing.get_origin(hint) is typing.Annotated:
        args = typing.get_args(hint)
        return args[0], tuple(args[1:])
    return hint, ()


def strip_optional(hint: typing.Any) -> typing.Tuple[typing.Any, bool]:
    """
    Removes ``None`` from a union hint and reports whether it was there.
    """
    if hint is None or hint is type(None):
        return None, True
    if typing.get_origin(hint) not in _union_types:
        return hint, False
    args = typing.get_args(hint)
    rest = tuple(a for a in args if a is not type(None))
    if len(rest) == len(args):
        return hint, False
    if len(rest) == 1:
        return rest[0], True
    return typing.Union[rest], True  # type: ignore


BUILTIN_KINDS: typing.Tuple[type, ...] = (
    datetime.datetime,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    decimal.Decimal,
    uuid.UUID,
    enum.Enum,
)

_builtin_modules = frozenset(["builtins", "typing", "collections", "collections.abc"])


def is_builtin_kind(type_: typing.Any) -> bool:
    """
    Tells whether ``type_`` is a scalar or container kind that is never
    mapped recursively.  Anything that is not a class counts as built-in,
    as does the absence of a type.
    """
    if type_ is None or type_ is typing.Any:
        return True
    if not isinstance(type_, type):
        return True
    if type_.__module__ in _builtin_modules:
        return True
    if issubclass(type_, (collections.abc.Mapping, collections.abc.Sequence)):
        return True
    return issubclass(type_, BUILTIN_KINDS)
