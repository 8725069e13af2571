import datetime
import decimal
import enum
import math
import re
import typing

from .exceptions import CastingError
from .interfaces import Caster

_integer_re = re.compile(r"\s*[+-]?\d+\s*\Z")
_utc_suffix_re = re.compile(r"[Zz]\Z")


def _is_finite(value: typing.Union[float, decimal.Decimal]) -> bool:
    if isinstance(value, decimal.Decimal):
        return value.is_finite()
    return math.isfinite(value)


class IntegerCaster(Caster):
    """
    Casts integers, integral floats and decimals, and strings holding an
    optionally signed decimal integer.  Booleans, non-integral numbers and
    anything else are rejected rather than truncated.
    """

    def cast(self, value: typing.Any) -> int:
        if isinstance(value, bool):
            raise CastingError(self, value, "booleans are not integers")
        if isinstance(value, int):
            return value
        if isinstance(value, (float, decimal.Decimal)):
            if not _is_finite(value):
                raise CastingError(self, value, "not a finite number")
            if value != int(value):
                raise CastingError(self, value, "would lose the fractional part")
            return int(value)
        if isinstance(value, str):
            if _integer_re.match(value) is None:
                raise CastingError(self, value, "not an integer literal")
            return int(value)
        raise CastingError(self, value, f"unsupported type {type(value).__name__}")


class FloatCaster(Caster):
    def cast(self, value: typing.Any) -> float:
        if isinstance(value, bool):
            raise CastingError(self, value, "booleans are not numbers")
        if isinstance(value, (int, float, decimal.Decimal, str)):
            try:
                return float(value)
            except (ValueError, OverflowError) as e:
                raise CastingError(self, value, "not a numeric literal") from e
        raise CastingError(self, value, f"unsupported type {type(value).__name__}")


class BooleanCaster(Caster):
    truthy: typing.ClassVar[typing.FrozenSet[str]] = frozenset(["1", "true", "yes", "on"])
    falsy: typing.ClassVar[typing.FrozenSet[str]] = frozenset(["0", "false", "no", "off"])

    def cast(self, value: typing.Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            if value in (0, 1):
                return bool(value)
            raise CastingError(self, value, "only 0 and 1 are booleans")
        if isinstance(value, str):
            v = value.strip().lower()
            if v in self.truthy:
                return True
            elif v in self.falsy:
                return False
            raise CastingError(self, value, "not a boolean literal")
        raise CastingError(self, value, f"unsupported type {type(value).__name__}")


DateTimeKind = typing.Union[
    typing.Type[datetime.datetime], typing.Type[datetime.date], typing.Type[datetime.time]
]


class DateTimeCaster(Caster):
    """
    Casts strings into :py:class:`datetime.datetime`, :py:class:`datetime.date`
    or :py:class:`datetime.time` values, depending on ``kind``.

    Strings are parsed with ``format`` through ``strptime`` when it is given,
    and as ISO 8601 otherwise.  Values that already are of ``kind`` are
    returned as they are.
    """

    kind: DateTimeKind
    format: typing.Optional[str]

    def _narrow(self, value: datetime.datetime) -> typing.Any:
        if self.kind is datetime.date:
            return value.date()
        elif self.kind is datetime.time:
            return value.timetz()
        return value

    def cast(self, value: typing.Any) -> typing.Any:
        if isinstance(value, datetime.datetime):
            return self._narrow(value)
        if isinstance(value, self.kind):
            return value
        if not isinstance(value, str):
            raise CastingError(self, value, f"unsupported type {type(value).__name__}")
        try:
            if self.format is not None:
                return self._narrow(datetime.datetime.strptime(value, self.format))
            text = value if self.kind is datetime.date else _utc_suffix_re.sub("+00:00", value)
            return self.kind.fromisoformat(text)
        except ValueError as e:
            raise CastingError(self, value, str(e)) from e

    def __init__(
        self, kind: DateTimeKind = datetime.datetime, format: typing.Optional[str] = None
    ):
        self.kind = kind
        self.format = format


class EnumCaster(Caster):
    """
    Casts a value into a member of ``enum_class``, looking it up by value
    first and then by member name.
    """

    enum_class: typing.Type[enum.Enum]

    def cast(self, value: typing.Any) -> enum.Enum:
        if isinstance(value, self.enum_class):
            return value
        for e in self.enum_class:
            if e.value == value:
                return e
        if isinstance(value, str):
            try:
                return self.enum_class[value]
            except KeyError:
                pass
        raise CastingError(self, value, f"not a valid value for {self.enum_class.__name__}")

    def __init__(self, enum_class: typing.Type[enum.Enum]):
        self.enum_class = enum_class
