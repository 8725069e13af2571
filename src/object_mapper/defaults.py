import logging
import typing

from .declarative import CastWith, find_marker
from .descriptors import ClassTypeDescriptor
from .exceptions import InjectionError, UnresolvableTypeError
from .interfaces import (
    BindingLookup,
    FieldDescriptor,
    Injector,
    NamingConvention,
    TypeDescriptor,
    TypeDescriptorResolver,
    Validator,
)
from .mapper import ObjectMapper
from .registry import CasterRegistry
from .utils import is_builtin_kind, snake_case
from .validation import RuleValidator

logger = logging.getLogger(__name__)

TypeDescriptorFactory = typing.Callable[[type], typing.Optional[TypeDescriptor]]


def describe_plain_class(type_: type) -> typing.Optional[TypeDescriptor]:
    if is_builtin_kind(type_):
        return None
    return ClassTypeDescriptor(type_)


class DefaultTypeDescriptorResolverImpl(TypeDescriptorResolver):
    """
    Resolves a :py:class:`TypeDescriptor` for a type by trying, in order,
    an explicitly registered descriptor, the type's own ``__describe__``
    classmethod, and then each factory until one of them returns a
    descriptor.  Descriptors are resolved once per type.
    """

    descrs: typing.Dict[type, TypeDescriptor]
    factories: typing.Sequence[TypeDescriptorFactory]

    def register(self, type_: type, descr: TypeDescriptor) -> None:
        self.descrs[type_] = descr

    def _describe(self, type_: type) -> TypeDescriptor:
        describe = getattr(type_, "__describe__", None)
        if describe is not None:
            return describe()
        for factory in self.factories:
            descr = factory(type_)
            if descr is not None:
                return descr
        raise UnresolvableTypeError(type_, "no factory can describe it")

    def query_descriptor_by_type(self, type_: type) -> TypeDescriptor:
        if not isinstance(type_, type):
            raise UnresolvableTypeError(type_, "not a class")
        descr = self.descrs.get(type_)
        if descr is not None:
            return descr
        descr = self._describe(type_)
        descr.fields  # raises UnresolvableTypeError on broken annotations
        logger.debug("resolved %r for %s", descr, type_.__name__)
        self.descrs[type_] = descr
        return descr

    def __init__(
        self, factories: typing.Sequence[TypeDescriptorFactory] = (describe_plain_class,)
    ):
        self.descrs = {}
        self.factories = factories


class DefaultInjectorImpl(Injector):
    """
    Instantiates the requested class without arguments and keeps the
    instance for subsequent requests.  Instances or factories may be bound
    in advance with :py:meth:`bind`.
    """

    instances: typing.Dict[type, typing.Any]
    factories: typing.Dict[type, typing.Callable[[], typing.Any]]

    def bind(self, type_: type, instance_or_factory: typing.Any) -> None:
        if callable(instance_or_factory) and not isinstance(instance_or_factory, type_):
            self.factories[type_] = instance_or_factory
        else:
            self.instances[type_] = instance_or_factory

    def resolve(self, type_: type) -> typing.Any:
        if type_ in self.instances:
            return self.instances[type_]
        factory = self.factories.get(type_, type_)
        try:
            instance = factory()
        except TypeError as e:
            raise InjectionError(type_, str(e)) from e
        self.instances[type_] = instance
        return instance

    def __init__(self):
        self.instances = {}
        self.factories = {}


class DefaultBindingLookupImpl(BindingLookup):
    """
    Finds a :py:class:`CastWith` marker among the metadata of a field, or
    the binding installed on a class by :py:func:`cast_with`.
    """

    def find_binding(
        self, subject: typing.Union[FieldDescriptor, type]
    ) -> typing.Optional[CastWith]:
        if isinstance(subject, FieldDescriptor):
            return find_marker(subject.metadata, CastWith)
        binding = getattr(subject, "__cast_with__", None)
        return binding if isinstance(binding, CastWith) else None


class DefaultNamingConventionImpl(NamingConvention):
    """
    Names inverse relations after the lowercased class name, ``BlogPost``
    giving ``blogpost`` and ``blogposts``.  Irregular plurals can be
    supplied through ``plurals``, keyed by class.
    """

    plurals: typing.Mapping[type, str]
    suffix: str

    def to_one_name(self, type_: type) -> str:
        return type_.__name__.lower()

    def to_many_name(self, type_: type) -> str:
        try:
            return self.plurals[type_]
        except KeyError:
            return self.to_one_name(type_) + self.suffix

    def __init__(
        self, plurals: typing.Optional[typing.Mapping[type, str]] = None, suffix: str = "s"
    ):
        self.plurals = plurals or {}
        self.suffix = suffix


class SnakeCaseNamingConventionImpl(DefaultNamingConventionImpl):
    """
    Names inverse relations after the snake-cased class name, ``BlogPost``
    giving ``blog_post`` and ``blog_posts``.
    """

    def to_one_name(self, type_: type) -> str:
        return snake_case(type_.__name__)


def object_mapper_with_defaults(
    descriptor_resolver: typing.Optional[TypeDescriptorResolver] = None,
    binding_lookup: typing.Optional[BindingLookup] = None,
    injector: typing.Optional[Injector] = None,
    validator: typing.Optional[Validator] = None,
    naming_convention: typing.Optional[NamingConvention] = None,
    delimiter: str = ".",
) -> ObjectMapper:
    """
    Builds an :py:class:`ObjectMapper` whose collaborators default to the
    ``Default*Impl`` classes of this module and a :py:class:`RuleValidator`.
    """
    if descriptor_resolver is None:
        descriptor_resolver = DefaultTypeDescriptorResolverImpl()
    return ObjectMapper(
        descriptor_resolver=descriptor_resolver,
        caster_registry=CasterRegistry(
            binding_lookup=binding_lookup or DefaultBindingLookupImpl(),
            injector=injector or DefaultInjectorImpl(),
        ),
        validator=validator or RuleValidator(descriptor_resolver),
        naming_convention=naming_convention or DefaultNamingConventionImpl(),
        delimiter=delimiter,
    )
