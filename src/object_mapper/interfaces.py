"""
This package contains a series of interface definitions that need to be
implemented by the collaborators of :py:class:`ObjectMapper`.

"""
import abc
import typing

if typing.TYPE_CHECKING:
    from .declarative import CastWith  # noqa: F401


class FieldDescriptor(metaclass=abc.ABCMeta):
    """
    A :py:class:`FieldDescriptor` describes a public field of a target type,
    which will end up being populated by :py:class:`ObjectMapper`.

    This class has nothing to do with Python's sense of "descriptors."
    """

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """
        Returns the field's name, unique within its type.
        """
        ...  # pragma: nocover

    @property
    @abc.abstractmethod
    def type(self) -> typing.Optional[type]:
        """
        Returns the field's declared type.
        In case the type is indeterminable, returns None.
        """
        ...  # pragma: nocover

    @property
    @abc.abstractmethod
    def element_type(self) -> typing.Optional[type]:
        """
        Returns the element type of a sequence field, or None if the field
        is not a sequence or declares no element type.
        """
        ...  # pragma: nocover

    @property
    @abc.abstractmethod
    def declaring_type(self) -> type:
        """
        Returns the class that declares the field.
        """
        ...  # pragma: nocover

    @property
    @abc.abstractmethod
    def allow_null(self) -> bool:
        """
        Returns the field's nullability.
        """
        ...  # pragma: nocover

    @property
    @abc.abstractmethod
    def has_default(self) -> bool:
        """
        Returns :py:const:`True` if the field may be left out of the source mapping.
        """
        ...  # pragma: nocover

    @property
    @abc.abstractmethod
    def metadata(self) -> typing.Sequence[typing.Any]:
        """
        Returns the declarative markers attached to the field.
        """
        ...  # pragma: nocover

    @property
    def accepts_builtin(self) -> bool:
        """
        Returns :py:const:`True` if the declared type is a built-in scalar or
        container kind, which is never mapped recursively.
        """
        from .utils import is_builtin_kind

        return is_builtin_kind(self.type)

    @abc.abstractmethod
    def fetch_value(self, target: typing.Any) -> typing.Any:
        """
        Fetches the value of the field from the target object.

        :param Any target: An object from which the value is fetched.
        :return: The fetched value.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def store_value(self, target: typing.Any, value: typing.Any) -> None:
        """
        Stores the value into the field of the target object.

        :param Any target: An object the value is stored into.
        :param Any value: The value to store.
        """
        ...  # pragma: nocover


class TypeDescriptor(metaclass=abc.ABCMeta):
    """
    A :py:class:`TypeDescriptor` denotes the shape of a target type.
    """

    @property
    @abc.abstractmethod
    def class_(self) -> type:
        """
        Returns the class that the descriptor denotes.

        :return: A type object that represents the class.
        """

    @property
    @abc.abstractmethod
    def fields(self) -> typing.Sequence[FieldDescriptor]:
        """
        Returns descriptors for the public fields in declaration order.

        :return: the sequence of :py:class:`FieldDescriptor`.
        """

    @abc.abstractmethod
    def get_field_by_name(self, name: str) -> FieldDescriptor:
        """
        Returns a field descriptor whose name is ``name``.

        :return: A :py:class:`FieldDescriptor` instance.
        """

    @abc.abstractmethod
    def allocate(self) -> typing.Any:
        """
        Returns a fresh instance of the class without running its constructor.

        :return: The allocated object.
        """


class Describable(typing.Protocol):
    """
    A class that knows how to describe itself.
    """

    @classmethod
    def __describe__(cls) -> TypeDescriptor:
        ...  # pragma: nocover


class TypeDescriptorResolver(metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def query_descriptor_by_type(self, type_: type) -> TypeDescriptor:
        """
        Returns the :py:class:`TypeDescriptor` that describes ``type_``.
        Raises :py:class:`UnresolvableTypeError` if the type cannot be described.
        """
        ...  # pragma: nocover


class Caster(metaclass=abc.ABCMeta):
    """
    A :py:class:`Caster` converts a raw value into a strongly-typed value
    for a single field or type.
    """

    @abc.abstractmethod
    def cast(self, value: typing.Any) -> typing.Any:
        """
        :param Any value: The raw value.
        :return: The typed value.
        :raises CastingError: if the value is rejected.
        """
        ...  # pragma: nocover


class Injector(metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def resolve(self, type_: type) -> typing.Any:
        """
        Returns an instance of ``type_``.
        """
        ...  # pragma: nocover


class BindingLookup(metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def find_binding(
        self, subject: typing.Union[FieldDescriptor, type]
    ) -> typing.Optional["CastWith"]:
        """
        Returns the caster binding declared on a field or on a type, if any.
        """
        ...  # pragma: nocover


class Validator(metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def validate(self, target: typing.Any) -> None:
        """
        Validates a fully populated object.

        :raises ValidationFailure: if the object is invalid.
        """
        ...  # pragma: nocover


class NamingConvention(metaclass=abc.ABCMeta):
    """
    Decides the keys under which a parent object is offered to its nested
    objects as an inverse relation.
    """

    @abc.abstractmethod
    def to_one_name(self, type_: type) -> str:
        ...  # pragma: nocover

    @abc.abstractmethod
    def to_many_name(self, type_: type) -> str:
        ...  # pragma: nocover
