import collections.abc
import logging
import typing

from .exceptions import CastingError, MissingValuesException
from .interfaces import (
    Caster,
    FieldDescriptor,
    NamingConvention,
    TypeDescriptorResolver,
    Validator,
)
from .registry import CasterRegistry
from .resolution import NOT_APPLICABLE, Resolution, Resolved
from .utils import is_builtin_kind, unwrap

logger = logging.getLogger(__name__)

Source = typing.Mapping[str, typing.Any]

T = typing.TypeVar("T")


def _is_mapping(value: typing.Any) -> bool:
    return isinstance(value, collections.abc.Mapping)


def _is_list(value: typing.Any) -> bool:
    return isinstance(value, collections.abc.Sequence) and not isinstance(
        value, (str, bytes, bytearray)
    )


class ObjectMapper:
    """
    An :py:class:`ObjectMapper` populates an object of a target type from a
    loosely typed nested mapping.

    Each public field of the target type is looked up in the source mapping
    and resolved by the first of these strategies that applies:

    * object resolution: a mapping given to a field whose declared type is
      not a built-in kind is mapped recursively into that type;
    * sequence resolution: a list given to a field whose element type is not
      a built-in kind has each of its mapping elements mapped into that type;
    * casting: the value is handed to the field's caster, or kept as is when
      there is none.

    ``None`` given to a nullable field is stored as is, without consulting
    any caster.

    Before a nested mapping is mapped, the parent object is offered to it
    under the names given by the :py:class:`NamingConvention` (``parent``
    and ``parents`` for a ``Parent`` by default), so that a nested field
    named after the parent's type receives a back reference.  Keys of the
    nested mapping always take precedence.  Callers must not hand in data
    that recurses into itself through such back references.

    Fields absent from the source that have no default are collected and
    reported together in a single :py:class:`MissingValuesException` once
    every field has been visited; the object is validated only after that.
    An object is never rolled back: on failure it stays partially populated.

    :param TypeDescriptorResolver descriptor_resolver: describes target types.
    :param CasterRegistry caster_registry: resolves the caster for a field.
    :param Validator validator: validates populated objects.
    :param NamingConvention naming_convention: names the inverse relations.
    :param str delimiter: separator of compound keys in the source mapping.
    """

    descriptor_resolver: TypeDescriptorResolver
    caster_registry: CasterRegistry
    validator: Validator
    naming_convention: NamingConvention
    delimiter: str

    def can_handle(self, source: typing.Any, target: typing.Any) -> bool:
        if not _is_mapping(source):
            return False
        if isinstance(target, type):
            return not is_builtin_kind(target)
        return target is not None and not is_builtin_kind(type(target))

    def _cast(
        self, caster: typing.Optional[Caster], field: FieldDescriptor, value: typing.Any
    ) -> typing.Any:
        if caster is None:
            return value
        try:
            return caster.cast(value)
        except CastingError:
            raise
        except (ValueError, TypeError) as e:
            raise CastingError(caster, value, str(e), field) from e

    def _build_input(
        self, field: FieldDescriptor, parent: typing.Any, data: Source
    ) -> typing.Dict[str, typing.Any]:
        declaring_type = field.declaring_type
        return {
            self.naming_convention.to_one_name(declaring_type): parent,
            self.naming_convention.to_many_name(declaring_type): [parent],
            **data,
        }

    def _resolve_value_from_type(
        self, field: FieldDescriptor, parent: typing.Any, data: typing.Any
    ) -> Resolution[typing.Any]:
        if field.type is None or field.accepts_builtin or not _is_mapping(data):
            return NOT_APPLICABLE
        caster = self.caster_registry.resolve(field)
        input_ = self._build_input(field, parent, data)
        return Resolved(self.map(self._cast(caster, field, input_), field.type))

    def _resolve_value_from_array(
        self, field: FieldDescriptor, parent: typing.Any, data: typing.Any
    ) -> Resolution[typing.Collection[typing.Any]]:
        element_type = field.element_type
        if element_type is None or is_builtin_kind(element_type) or not _is_list(data):
            return NOT_APPLICABLE
        caster = self.caster_registry.resolve(field)
        values: typing.List[typing.Any] = []
        for item in data:
            if not _is_mapping(item):
                values.append(self._cast(caster, field, item))
                continue
            input_ = self._build_input(field, parent, item)
            values.append(self.map(self._cast(caster, field, input_), element_type))
        container = field.type
        if isinstance(container, type) and issubclass(container, (tuple, set, frozenset)):
            return Resolved(container(values))
        return Resolved(values)

    def _resolve_value(self, field: FieldDescriptor, parent: typing.Any, data: typing.Any):
        if data is None and field.allow_null:
            return None
        result = self._resolve_value_from_type(field, parent, data)
        if isinstance(result, Resolved):
            return result.value
        result = self._resolve_value_from_array(field, parent, data)
        if isinstance(result, Resolved):
            return result.value
        return self._cast(self.caster_registry.resolve(field), field, data)

    @typing.overload
    def map(self, source: Source, target: typing.Type[T]) -> T:
        ...  # pragma: nocover

    @typing.overload
    def map(self, source: Source, target: T) -> T:
        ...  # pragma: nocover

    def map(self, source, target):
        """
        Populates ``target`` from ``source``.

        :param Mapping source: the source mapping.
        :param target: a class to allocate an instance of, or an existing
                       instance whose fields get overwritten.
        :return: the populated instance.
        :raises UnresolvableTypeError: if the target type cannot be described.
        :raises MissingValuesException: if required fields are absent.
        :raises CastingError: if a caster rejects a value.
        :raises ValidationFailure: if the validator rejects the object.
        """
        if not _is_mapping(source):
            raise TypeError(f"source must be a mapping, got {type(source).__name__}")
        if isinstance(target, type):
            descr = self.descriptor_resolver.query_descriptor_by_type(target)
            obj = descr.allocate()
        else:
            descr = self.descriptor_resolver.query_descriptor_by_type(type(target))
            obj = target

        data = unwrap(source, self.delimiter)
        logger.debug("mapping %r into %s", list(data), descr.class_.__name__)

        missing: typing.List[str] = []
        for field in descr.fields:
            if field.name not in data:
                if not field.has_default:
                    missing.append(field.name)
                continue
            field.store_value(obj, self._resolve_value(field, obj, data[field.name]))

        if missing:
            logger.debug("missing values for %s: %s", descr.class_.__name__, missing)
            raise MissingValuesException(descr.class_, missing)

        self.validator.validate(obj)
        return obj

    def map_many(
        self, sources: typing.Iterable[Source], target: typing.Type[T]
    ) -> typing.List[T]:
        """
        Maps every mapping of ``sources`` into a fresh instance of ``target``, in order.
        """
        return [self.map(source, target) for source in sources]

    def __init__(
        self,
        descriptor_resolver: TypeDescriptorResolver,
        caster_registry: CasterRegistry,
        validator: Validator,
        naming_convention: NamingConvention,
        delimiter: str = ".",
    ):
        self.descriptor_resolver = descriptor_resolver
        self.caster_registry = caster_registry
        self.validator = validator
        self.naming_convention = naming_convention
        self.delimiter = delimiter
