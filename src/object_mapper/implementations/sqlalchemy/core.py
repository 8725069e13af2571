import typing
from collections import OrderedDict

import sqlalchemy as sa  # type: ignore
from sqlalchemy import orm  # type: ignore

from ...declarative import METADATA_KEY, ElementType, find_marker
from ...exceptions import FieldNotFoundError
from ...interfaces import FieldDescriptor, TypeDescriptor
from ...utils import assert_not_none


def is_alien_clause(sa_mapper: orm.Mapper, expression: sa.sql.ClauseElement) -> bool:
    if not isinstance(expression, sa.Column):
        return True
    if expression.table is None:
        return True
    return expression.table not in sa_mapper.tables


Tprop = typing.TypeVar("Tprop", bound=orm.interfaces.MapperProperty)


class SQLAFieldDescriptor(FieldDescriptor, typing.Generic[Tprop]):
    belonged_to: "SQLATypeDescriptor"
    property: Tprop

    @property
    def _column(self) -> typing.Optional[sa.Column]:
        if isinstance(self.property, orm.ColumnProperty):
            if not is_alien_clause(self.property.parent, self.property.expression):
                return self.property.expression
        return None

    @property
    def name(self) -> str:
        return self.property.key

    @property
    def type(self) -> typing.Optional[type]:
        if isinstance(self.property, orm.RelationshipProperty):
            if self.property.uselist:
                return self.property.collection_class or list
            return self.property.mapper.class_
        elif isinstance(self.property, orm.CompositeProperty):
            return self.property.composite_class
        column = self._column
        if column is not None:
            try:
                return column.type.python_type
            except NotImplementedError:
                return None
        return None

    @property
    def element_type(self) -> typing.Optional[type]:
        if isinstance(self.property, orm.RelationshipProperty):
            return self.property.mapper.class_ if self.property.uselist else None
        marker = find_marker(self.metadata, ElementType)
        return marker.type if marker is not None else None

    @property
    def declaring_type(self) -> type:
        return self.property.parent.class_

    @property
    def allow_null(self) -> bool:
        if isinstance(self.property, orm.RelationshipProperty):
            return not self.property.uselist
        column = self._column
        if column is not None:
            return bool(column.nullable)
        return False

    @property
    def has_default(self) -> bool:
        """
        Relationships and composites may always be left out, as may columns
        that have a default, are nullable, or take part in a primary or a
        foreign key.
        """
        if not isinstance(self.property, orm.ColumnProperty):
            return True
        column = self._column
        if column is None:
            return True
        return bool(
            column.default is not None
            or column.server_default is not None
            or column.nullable
            or column.primary_key
            or column.foreign_keys
        )

    @property
    def metadata(self) -> typing.Sequence[typing.Any]:
        if isinstance(self.property, orm.ColumnProperty):
            info = self.property.columns[0].info
        else:
            info = self.property.info
        return tuple(info.get(METADATA_KEY, ()))

    def fetch_value(self, target: typing.Any) -> typing.Any:
        return self.property.class_attribute.__get__(target, None)

    def store_value(self, target: typing.Any, value: typing.Any) -> None:
        self.property.class_attribute.__set__(target, value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.belonged_to.class_.__name__}.{self.name})"

    def __init__(self, belonged_to: "SQLATypeDescriptor", property: Tprop):
        self.belonged_to = belonged_to
        self.property = property


class SQLATypeDescriptor(TypeDescriptor):
    """
    A :py:class:`SQLATypeDescriptor` describes a class mapped by SQLAlchemy.
    Columns, composites and relationships all become fields; a to-many
    relationship is a sequence field whose element type is the related class.
    """

    mapper: orm.Mapper
    fields_: "typing.Optional[OrderedDict[str, SQLAFieldDescriptor]]" = None

    @property
    def class_(self) -> type:
        return self.mapper.class_

    def _populate_fields(self) -> None:
        if self.fields_ is None:
            fields: "OrderedDict[str, SQLAFieldDescriptor]" = OrderedDict()
            for sa_attr in self.mapper.attrs:
                if sa_attr.key.startswith("_"):
                    continue
                if isinstance(sa_attr, orm.ColumnProperty):
                    fields[sa_attr.key] = SQLAFieldDescriptor[orm.ColumnProperty](self, sa_attr)
                elif isinstance(sa_attr, orm.CompositeProperty):
                    fields[sa_attr.key] = SQLAFieldDescriptor[orm.CompositeProperty](
                        self, sa_attr
                    )
                elif isinstance(sa_attr, orm.RelationshipProperty):
                    fields[sa_attr.key] = SQLAFieldDescriptor[orm.RelationshipProperty](
                        self, sa_attr
                    )
            self.fields_ = fields

    @property
    def fields(self) -> typing.Sequence[SQLAFieldDescriptor]:
        self._populate_fields()
        return list(assert_not_none(self.fields_).values())

    def get_field_by_name(self, name: str) -> SQLAFieldDescriptor:
        self._populate_fields()
        try:
            return assert_not_none(self.fields_)[name]
        except KeyError:
            raise FieldNotFoundError(self, name)

    def allocate(self) -> typing.Any:
        return self.mapper.class_manager.new_instance()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.class_.__name__})"

    def __init__(self, mapper: orm.Mapper):
        self.mapper = mapper


def describe_sqla_class(type_: type) -> typing.Optional[SQLATypeDescriptor]:
    """
    Returns a :py:class:`SQLATypeDescriptor` if ``type_`` is mapped by SQLAlchemy.
    """
    sa_mapper = sa.inspect(type_, raiseerr=False)
    if not isinstance(sa_mapper, orm.Mapper):
        return None
    return SQLATypeDescriptor(sa_mapper)
