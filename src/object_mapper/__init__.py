"""
object_mapper populates strongly typed objects from loosely typed nested
mappings.

Synopsis
--------

.. code-block:: python

   import dataclasses
   import typing

   from object_mapper import object_mapper_with_defaults

   @dataclasses.dataclass
   class Author:
       name: str
       books: typing.List["Book"] = dataclasses.field(default_factory=list)

   @dataclasses.dataclass
   class Book:
       title: str
       author: typing.Optional[Author] = None

   mapper = object_mapper_with_defaults()
   author = mapper.map({"name": "Brent", "books": [{"title": "Timeline Taxi"}]}, Author)
   assert author.books[0].author is author

"""
from .casters import (  # noqa: F401
    BooleanCaster,
    DateTimeCaster,
    EnumCaster,
    FloatCaster,
    IntegerCaster,
)
from .declarative import CastWith, DateFormat, ElementType, cast_with, field  # noqa: F401
from .defaults import (  # noqa: F401
    DefaultBindingLookupImpl,
    DefaultInjectorImpl,
    DefaultNamingConventionImpl,
    DefaultTypeDescriptorResolverImpl,
    SnakeCaseNamingConventionImpl,
    object_mapper_with_defaults,
)
from .exceptions import (  # noqa: F401
    CastingError,
    FieldNotFoundError,
    InjectionError,
    InvalidDeclarationError,
    MissingValuesException,
    ObjectMapperException,
    UnresolvableTypeError,
    ValidationFailure,
)
from .interfaces import (  # noqa: F401
    BindingLookup,
    Caster,
    Describable,
    FieldDescriptor,
    Injector,
    NamingConvention,
    TypeDescriptor,
    TypeDescriptorResolver,
    Validator,
)
from .mapper import ObjectMapper  # noqa: F401
from .registry import CasterRegistry  # noqa: F401
