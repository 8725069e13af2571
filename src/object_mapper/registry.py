import datetime
import enum
import logging
import typing

from .casters import BooleanCaster, DateTimeCaster, EnumCaster, FloatCaster, IntegerCaster
from .declarative import CastWith, DateFormat, find_marker
from .interfaces import BindingLookup, Caster, FieldDescriptor, Injector

logger = logging.getLogger(__name__)


class CasterRegistry:
    """
    Resolves the caster for a field, the first match winning:

    1. a :py:class:`CastWith` binding on the field itself,
    2. a :py:class:`CastWith` binding on the field's declared type,
    3. a built-in caster for integers, floats, booleans, enums and
       date/time kinds,
    4. none, in which case values pass through unchanged.

    Bound casters are materialized by the :py:class:`Injector`; whatever it
    raises propagates to the caller.
    """

    binding_lookup: BindingLookup
    injector: Injector

    def find_binding(self, field: FieldDescriptor) -> typing.Optional[CastWith]:
        binding = self.binding_lookup.find_binding(field)
        if binding is None and field.type is not None:
            binding = self.binding_lookup.find_binding(field.type)
        return binding

    def builtin_caster(self, field: FieldDescriptor) -> typing.Optional[Caster]:
        type_ = field.type
        if not isinstance(type_, type):
            return None
        if issubclass(type_, bool):
            return BooleanCaster()
        elif issubclass(type_, enum.Enum):
            return EnumCaster(type_)
        elif issubclass(type_, int):
            return IntegerCaster()
        elif issubclass(type_, float):
            return FloatCaster()
        elif issubclass(type_, (datetime.datetime, datetime.date, datetime.time)):
            date_format = find_marker(field.metadata, DateFormat)
            if issubclass(type_, datetime.datetime):
                kind: typing.Any = datetime.datetime
            elif issubclass(type_, datetime.date):
                kind = datetime.date
            else:
                kind = datetime.time
            return DateTimeCaster(kind, date_format.format if date_format is not None else None)
        return None

    def resolve(self, field: FieldDescriptor) -> typing.Optional[Caster]:
        binding = self.find_binding(field)
        if binding is not None:
            logger.debug("resolving %s for field %s", binding.caster.__name__, field.name)
            return self.injector.resolve(binding.caster)
        return self.builtin_caster(field)

    def __init__(self, binding_lookup: BindingLookup, injector: Injector):
        self.binding_lookup = binding_lookup
        self.injector = injector
