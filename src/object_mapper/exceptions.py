import abc
import typing

from .utils.formatting import english_enumerate


class ObjectMapperException(Exception, metaclass=abc.ABCMeta):
    @property
    @abc.abstractmethod
    def message(self) -> str:
        ...  # pragma: nocover

    def __str__(self):
        return self.message


class InvalidDeclarationError(ObjectMapperException):
    _message: str

    @property
    def message(self) -> str:
        return self._message

    def __init__(self, message: str):
        self._message = message


class UnresolvableTypeError(ObjectMapperException):
    type_: typing.Any
    detail: typing.Optional[str]

    @property
    def message(self) -> str:
        return f'unable to describe {self.type_!r}{" (" + self.detail + ")" if self.detail is not None else ""}'

    def __init__(self, type_: typing.Any, detail: typing.Optional[str] = None):
        self.type_ = type_
        self.detail = detail


class FieldNotFoundError(ObjectMapperException):
    descr: "interfaces.TypeDescriptor"
    name: str

    @property
    def message(self) -> str:
        return f"no such field found in {self.descr.class_.__name__}: {self.name}"

    def __init__(self, descr: "interfaces.TypeDescriptor", name: str):
        self.descr = descr
        self.name = name


class MissingValuesException(ObjectMapperException):
    """
    Raised once per :py:meth:`ObjectMapper.map` call when one or more fields
    without a default value are absent from the source mapping.
    """

    target: type
    names: typing.Sequence[str]

    @property
    def message(self) -> str:
        return f"could not map {self.target.__name__}, missing values for {english_enumerate(self.names)}"

    def __init__(self, target: type, names: typing.Sequence[str]):
        self.target = target
        self.names = tuple(names)


class CastingError(ObjectMapperException):
    caster: typing.Any
    value: typing.Any
    detail: typing.Optional[str]
    field: typing.Optional["interfaces.FieldDescriptor"]

    @property
    def message(self) -> str:
        subject = f" for field {self.field.name}" if self.field is not None else ""
        return f'{type(self.caster).__name__} could not cast {self.value!r}{subject}{" (" + self.detail + ")" if self.detail is not None else ""}'

    def __init__(
        self,
        caster: typing.Any,
        value: typing.Any,
        detail: typing.Optional[str] = None,
        field: typing.Optional["interfaces.FieldDescriptor"] = None,
    ):
        self.caster = caster
        self.value = value
        self.detail = detail
        self.field = field


class InjectionError(ObjectMapperException):
    type_: typing.Any
    detail: str

    @property
    def message(self) -> str:
        return f"unable to resolve {self.type_!r}: {self.detail}"

    def __init__(self, type_: typing.Any, detail: str):
        self.type_ = type_
        self.detail = detail


class ValidationFailure(ObjectMapperException):
    target: typing.Any
    failing_rules: typing.Mapping[str, typing.Sequence["validation.Rule"]]

    @property
    def message(self) -> str:
        return f"{type(self.target).__name__} failed validation on {english_enumerate(self.failing_rules.keys())}"

    def __init__(
        self,
        target: typing.Any,
        failing_rules: typing.Mapping[str, typing.Sequence["validation.Rule"]],
    ):
        self.target = target
        self.failing_rules = failing_rules


if typing.TYPE_CHECKING:
    from . import interfaces  # noqa: E402
    from . import validation  # noqa: E402
