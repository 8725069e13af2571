import collections.abc
import dataclasses
import inspect
import logging
import typing
from collections import OrderedDict

from .declarative import METADATA_KEY, ElementType, find_marker
from .exceptions import FieldNotFoundError, InvalidDeclarationError, UnresolvableTypeError
from .interfaces import FieldDescriptor, TypeDescriptor
from .utils import assert_not_none, strip_annotated, strip_optional

logger = logging.getLogger(__name__)

_sequence_origins = frozenset(
    [
        list,
        tuple,
        set,
        frozenset,
        collections.abc.Collection,
        collections.abc.Iterable,
        collections.abc.MutableSequence,
        collections.abc.MutableSet,
        collections.abc.Sequence,
        collections.abc.Set,
    ]
)


def _check_hashable(container: typing.Optional[type], element: typing.Optional[type]) -> None:
    if container is None or element is None or not isinstance(element, type):
        return
    if issubclass(container, (set, frozenset)) and element.__hash__ is None:
        raise InvalidDeclarationError(
            f"{element.__name__} is unhashable and cannot be an element of {container.__name__}"
        )


def split_sequence_hint(
    hint: typing.Any,
) -> typing.Optional[typing.Tuple[type, typing.Optional[type]]]:
    """
    Returns the container class and the element class of a parameterized
    sequence hint such as ``List[Item]`` or ``Tuple[Item, ...]``, or None if
    ``hint`` is not one.
    """
    origin = typing.get_origin(hint)
    if origin not in _sequence_origins:
        return None
    args = typing.get_args(hint)
    element: typing.Any = None
    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            element = args[0]
    elif args:
        element = args[0]
    element, _ = strip_optional(strip_annotated(element)[0])
    if element is typing.Any or not isinstance(element, type):
        element = None
    return origin, element


class ClassFieldDescriptor(FieldDescriptor):
    _name: str
    _type: typing.Optional[type]
    _element_type: typing.Optional[type]
    _declaring_type: type
    _allow_null: bool
    _metadata: typing.Sequence[typing.Any]
    _default: typing.Any
    _default_factory: typing.Any
    _frozen: bool

    @property
    def name(self) -> str:
        return self._name

    @property
    def type(self) -> typing.Optional[type]:
        return self._type

    @property
    def element_type(self) -> typing.Optional[type]:
        return self._element_type

    @property
    def declaring_type(self) -> type:
        return self._declaring_type

    @property
    def allow_null(self) -> bool:
        return self._allow_null

    @property
    def has_default(self) -> bool:
        return self._default is not dataclasses.MISSING or (
            self._default_factory is not dataclasses.MISSING
        )

    @property
    def metadata(self) -> typing.Sequence[typing.Any]:
        return self._metadata

    def default_value(self) -> typing.Any:
        if self._default_factory is not dataclasses.MISSING:
            return self._default_factory()
        assert self._default is not dataclasses.MISSING
        return self._default

    def fetch_value(self, target: typing.Any) -> typing.Any:
        return getattr(target, self._name)

    def store_value(self, target: typing.Any, value: typing.Any) -> None:
        if self._frozen:
            object.__setattr__(target, self._name, value)
        else:
            setattr(target, self._name, value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._declaring_type.__name__}.{self._name})"

    def __init__(
        self,
        name: str,
        type: typing.Optional[type],
        declaring_type: type,
        element_type: typing.Optional[type] = None,
        allow_null: bool = False,
        metadata: typing.Sequence[typing.Any] = (),
        default: typing.Any = dataclasses.MISSING,
        default_factory: typing.Any = dataclasses.MISSING,
        frozen: bool = False,
    ):
        self._name = name
        self._type = type
        self._element_type = element_type
        self._declaring_type = declaring_type
        self._allow_null = allow_null
        self._metadata = tuple(metadata)
        self._default = default
        self._default_factory = default_factory
        self._frozen = frozen


class ClassTypeDescriptor(TypeDescriptor):
    """
    A :py:class:`ClassTypeDescriptor` describes a plain class or a dataclass
    from its annotations.

    Public annotated names are collected from the least derived base to the
    class itself, the first annotation fixing the position of a name and the
    last one deciding its declaring class.  A field has a default when the
    class (or a base) assigns it a value, when its dataclass field has a
    default or a default factory, or when ``__init__`` takes a parameter of
    the same name that has a default.
    """

    _class: type
    fields_: "typing.Optional[OrderedDict[str, ClassFieldDescriptor]]" = None

    @property
    def class_(self) -> type:
        return self._class

    def _init_parameters(self) -> typing.Mapping[str, inspect.Parameter]:
        init = self._class.__init__  # type: ignore
        if init is object.__init__:
            return {}
        try:
            return inspect.signature(init).parameters
        except (TypeError, ValueError):
            return {}

    def _class_attribute_default(self, name: str) -> typing.Any:
        for klass in self._class.__mro__:
            v = vars(klass).get(name, dataclasses.MISSING)
            if v is dataclasses.MISSING or isinstance(v, dataclasses.Field):
                continue
            if inspect.isdatadescriptor(v) or inspect.ismethoddescriptor(v):
                continue
            return v
        return dataclasses.MISSING

    def _populate_fields(self) -> None:
        if self.fields_ is not None:
            return

        try:
            hints = typing.get_type_hints(self._class, include_extras=True)
        except (NameError, TypeError, AttributeError) as e:
            raise UnresolvableTypeError(self._class, str(e)) from e

        declaring: typing.Dict[str, type] = {}
        order: typing.List[str] = []
        for klass in reversed(self._class.__mro__):
            if klass is object:
                continue
            for name in inspect.get_annotations(klass):
                if name not in declaring:
                    order.append(name)
                declaring[name] = klass

        dc_fields: typing.Mapping[str, dataclasses.Field] = {}
        frozen = False
        if dataclasses.is_dataclass(self._class):
            dc_fields = {f.name: f for f in dataclasses.fields(self._class)}
            frozen = self._class.__dataclass_params__.frozen  # type: ignore
        init_params = self._init_parameters()

        fields: "OrderedDict[str, ClassFieldDescriptor]" = OrderedDict()
        for name in order:
            if name.startswith("_") or name not in hints:
                continue
            hint, metadata = strip_annotated(hints[name])
            if (
                hint is typing.ClassVar
                or typing.get_origin(hint) is typing.ClassVar
                or isinstance(hint, dataclasses.InitVar)
            ):
                continue
            hint, allow_null = strip_optional(hint)
            hint, inner_metadata = strip_annotated(hint)
            metadata = tuple(metadata) + tuple(inner_metadata)

            default: typing.Any = dataclasses.MISSING
            default_factory: typing.Any = dataclasses.MISSING
            dc_field = dc_fields.get(name)
            if dc_field is not None:
                metadata = tuple(metadata) + tuple(dc_field.metadata.get(METADATA_KEY, ()))
                default = dc_field.default
                default_factory = dc_field.default_factory
            if default is dataclasses.MISSING and default_factory is dataclasses.MISSING:
                default = self._class_attribute_default(name)
            if default is dataclasses.MISSING and default_factory is dataclasses.MISSING:
                param = init_params.get(name)
                if param is not None and param.default is not inspect.Parameter.empty:
                    default = param.default

            type_, element_type = self._resolve_types(hint, metadata)
            fields[name] = ClassFieldDescriptor(
                name=name,
                type=type_,
                declaring_type=declaring[name],
                element_type=element_type,
                allow_null=allow_null,
                metadata=metadata,
                default=default,
                default_factory=default_factory,
                frozen=frozen,
            )
        logger.debug("described %s with fields %s", self._class.__name__, list(fields))
        self.fields_ = fields

    @staticmethod
    def _resolve_types(
        hint: typing.Any, metadata: typing.Sequence[typing.Any]
    ) -> typing.Tuple[typing.Optional[type], typing.Optional[type]]:
        marker = find_marker(metadata, ElementType)
        declared_element = marker.type if marker is not None else None
        seq = split_sequence_hint(hint)
        if seq is not None:
            container, element = seq
            if declared_element is not None:
                element = declared_element
            _check_hashable(container, element)
            return container, element
        class_ = hint if isinstance(hint, type) else typing.get_origin(hint)
        if class_ is not typing.Any and isinstance(class_, type):
            if declared_element is not None and (
                issubclass(class_, (str, bytes, collections.abc.Mapping))
                or not issubclass(class_, collections.abc.Iterable)
            ):
                raise InvalidDeclarationError(
                    f"{marker} is declared on a field of non-sequence type {class_.__name__}"
                )
            _check_hashable(class_, declared_element)
            return class_, declared_element
        return None, declared_element

    @property
    def fields(self) -> typing.Sequence[ClassFieldDescriptor]:
        self._populate_fields()
        return list(assert_not_none(self.fields_).values())

    def get_field_by_name(self, name: str) -> ClassFieldDescriptor:
        self._populate_fields()
        try:
            return assert_not_none(self.fields_)[name]
        except KeyError:
            raise FieldNotFoundError(self, name)

    def allocate(self) -> typing.Any:
        obj = self._class.__new__(self._class)
        for field in self.fields:
            if field.has_default:
                field.store_value(obj, field.default_value())
        return obj

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._class.__name__})"

    def __init__(self, class_: type):
        if not isinstance(class_, type):
            raise UnresolvableTypeError(class_, "not a class")
        self._class = class_
