import typing

from ...defaults import (
    DefaultTypeDescriptorResolverImpl,
    describe_plain_class,
    object_mapper_with_defaults as _object_mapper_with_defaults,
)
from ...mapper import ObjectMapper
from .core import describe_sqla_class


def sqla_descriptor_resolver() -> DefaultTypeDescriptorResolverImpl:
    return DefaultTypeDescriptorResolverImpl(factories=(describe_sqla_class, describe_plain_class))


def object_mapper_with_defaults(**kwargs: typing.Any) -> ObjectMapper:
    """
    Builds an :py:class:`ObjectMapper` that describes SQLAlchemy-mapped
    classes through their mappers and falls back to plain class
    introspection for everything else.  Keyword arguments are passed on to
    :py:func:`object_mapper.defaults.object_mapper_with_defaults`.
    """
    kwargs.setdefault("descriptor_resolver", sqla_descriptor_resolver())
    return _object_mapper_with_defaults(**kwargs)
