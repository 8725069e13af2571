"""
object_mapper.declarative module contains the markers by which a target
type tells :py:class:`ObjectMapper` how to treat its fields.

Synopsis
--------

.. code-block:: python

   import dataclasses
   import typing

   from object_mapper.declarative import CastWith, DateFormat, ElementType, cast_with

   @cast_with(MoneyCaster)
   class Money:
       amount: int
       currency: str

   @dataclasses.dataclass
   class Invoice:
       number: typing.Annotated[str, CastWith(UpperCaster)]
       issued_at: typing.Annotated[datetime.date, DateFormat("%d/%m/%Y")]
       lines: typing.List["Line"]
       tags: typing.Annotated[list, ElementType(Tag)] = dataclasses.field(default_factory=list)
       total: typing.Optional[Money] = None

Markers may be attached through ``typing.Annotated``, through
:py:func:`field` (which stores them in the dataclass field metadata), or,
for SQLAlchemy models, through ``info={"object_mapper": [...]}``.
"""
import dataclasses
import typing

METADATA_KEY = "object_mapper"


@dataclasses.dataclass(frozen=True)
class CastWith:
    """
    Binds a caster class to a field or, through :py:func:`cast_with`, to a type.
    The caster is materialized by the :py:class:`Injector`.
    """

    caster: type


@dataclasses.dataclass(frozen=True)
class ElementType:
    """
    Declares the element type of a sequence field that carries no generic parameter.
    """

    type: type


@dataclasses.dataclass(frozen=True)
class DateFormat:
    """
    Declares the ``strptime`` format the date/time caster parses the field with.
    """

    format: str


Tc = typing.TypeVar("Tc", bound=type)


def cast_with(caster: type) -> typing.Callable[[Tc], Tc]:
    """
    Class decorator that binds ``caster`` to every field declared with the decorated type.
    """

    def _(class_: Tc) -> Tc:
        setattr(class_, "__cast_with__", CastWith(caster))
        return class_

    return _


def field(*markers: typing.Any, **kwargs: typing.Any) -> typing.Any:
    """
    A thin wrapper around :py:func:`dataclasses.field` that records ``markers``
    in the field metadata.
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[METADATA_KEY] = tuple(metadata.get(METADATA_KEY, ())) + markers
    return dataclasses.field(metadata=metadata, **kwargs)


Tm = typing.TypeVar("Tm")


def find_marker(
    metadata: typing.Iterable[typing.Any], marker_type: typing.Type[Tm]
) -> typing.Optional[Tm]:
    for m in metadata:
        if isinstance(m, marker_type):
            return m
    return None
