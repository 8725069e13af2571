import abc
import collections.abc
import logging
import re
import typing

from .exceptions import ValidationFailure
from .interfaces import TypeDescriptorResolver, Validator

logger = logging.getLogger(__name__)


class Rule(metaclass=abc.ABCMeta):
    """
    A validation rule, attached to a field as a declarative marker:

    .. code-block:: python

       name: typing.Annotated[str, Length(min=1, max=64)]
    """

    @abc.abstractmethod
    def is_valid(self, value: typing.Any) -> bool:
        ...  # pragma: nocover

    @property
    @abc.abstractmethod
    def message(self) -> str:
        ...  # pragma: nocover

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class Length(Rule):
    min: typing.Optional[int]
    max: typing.Optional[int]

    def is_valid(self, value: typing.Any) -> bool:
        if not isinstance(value, collections.abc.Sized):
            return False
        n = len(value)
        return (self.min is None or n >= self.min) and (self.max is None or n <= self.max)

    @property
    def message(self) -> str:
        if self.max is None:
            return f"length must be at least {self.min}"
        elif self.min is None:
            return f"length must be at most {self.max}"
        return f"length must be between {self.min} and {self.max}"

    def __init__(self, min: typing.Optional[int] = None, max: typing.Optional[int] = None):
        self.min = min
        self.max = max


class Between(Rule):
    min: typing.Any
    max: typing.Any

    def is_valid(self, value: typing.Any) -> bool:
        try:
            return bool(self.min <= value <= self.max)
        except TypeError:
            return False

    @property
    def message(self) -> str:
        return f"value must be between {self.min} and {self.max}"

    def __init__(self, min: typing.Any, max: typing.Any):
        self.min = min
        self.max = max


class Matches(Rule):
    pattern: re.Pattern

    def is_valid(self, value: typing.Any) -> bool:
        return isinstance(value, str) and self.pattern.fullmatch(value) is not None

    @property
    def message(self) -> str:
        return f"value must match {self.pattern.pattern}"

    def __init__(self, pattern: typing.Union[str, re.Pattern]):
        self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern


class NotEmpty(Rule):
    def is_valid(self, value: typing.Any) -> bool:
        if isinstance(value, str):
            return value.strip() != ""
        if isinstance(value, collections.abc.Sized):
            return len(value) > 0
        return value is not None

    @property
    def message(self) -> str:
        return "value must not be empty"


class RuleValidator(Validator):
    """
    Checks every :py:class:`Rule` attached to the fields of an object and
    raises a single :py:class:`ValidationFailure` listing all the rules that
    failed, by field.  Fields that were never set are skipped, as are
    ``None`` values of nullable fields.
    """

    descriptor_resolver: TypeDescriptorResolver

    def validate(self, target: typing.Any) -> None:
        descr = self.descriptor_resolver.query_descriptor_by_type(type(target))
        failing_rules: typing.Dict[str, typing.List[Rule]] = {}
        for field in descr.fields:
            rules = [m for m in field.metadata if isinstance(m, Rule)]
            if not rules:
                continue
            try:
                value = field.fetch_value(target)
            except AttributeError:
                continue
            if value is None and field.allow_null:
                continue
            failed = [rule for rule in rules if not rule.is_valid(value)]
            if failed:
                failing_rules[field.name] = failed
        if failing_rules:
            logger.debug("%s failed validation: %r", type(target).__name__, failing_rules)
            raise ValidationFailure(target, failing_rules)

    def __init__(self, descriptor_resolver: TypeDescriptorResolver):
        self.descriptor_resolver = descriptor_resolver


class NullValidatorImpl(Validator):
    def validate(self, target: typing.Any) -> None:
        pass
