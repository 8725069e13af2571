import dataclasses
import datetime
import enum
import typing

import pytest

from ..declarative import CastWith, DateFormat, ElementType, cast_with
from ..defaults import SnakeCaseNamingConventionImpl, object_mapper_with_defaults
from ..descriptors import ClassFieldDescriptor
from ..exceptions import (
    CastingError,
    InvalidDeclarationError,
    MissingValuesException,
    UnresolvableTypeError,
    ValidationFailure,
)
from ..interfaces import Caster
from ..validation import Between, Length, Matches, NotEmpty
from .testing import (
    ExplodingCaster,
    LowerCaster,
    PlainTypeDescriptor,
    RecordingValidator,
    RejectingValidator,
    UpperCaster,
)


@dataclasses.dataclass
class Author:
    name: str
    books: typing.List["Book"] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class Book:
    title: str
    pages: int = 0
    author: typing.Optional[Author] = None


@dataclasses.dataclass
class Guardian:
    name: str
    ward: typing.Optional["Ward"] = None


@dataclasses.dataclass
class Ward:
    name: str
    owner: typing.Optional[Guardian] = None
    guardian: typing.Optional[Guardian] = None
    guardians: typing.List[Guardian] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class Item:
    x: int


@dataclasses.dataclass
class Order:
    items: typing.Annotated[list, ElementType(Item)]
    notes: list = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class Crate:
    items: typing.Tuple[Item, ...] = ()


@dataclasses.dataclass
class Shelf:
    entries: typing.List["Entry"] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class Bookcase(Shelf):
    label: str = ""


@dataclasses.dataclass
class Entry:
    name: str
    shelf: typing.Optional[Shelf] = None
    bookcase: typing.Optional[Bookcase] = None


@cast_with(LowerCaster)
class Code:
    pass


@dataclasses.dataclass
class Coupon:
    code: typing.Annotated[Code, CastWith(UpperCaster)]
    alt_code: Code


class RenamingCaster(Caster):
    def cast(self, value: typing.Any) -> typing.Any:
        value = dict(value)
        if "full_name" in value:
            value["name"] = value.pop("full_name")
        return value


@cast_with(RenamingCaster)
@dataclasses.dataclass
class Owner:
    name: str


@dataclasses.dataclass
class Pet:
    owner: Owner


@dataclasses.dataclass
class Tag:
    name: str


class TagCaster(Caster):
    def cast(self, value: typing.Any) -> typing.Any:
        if isinstance(value, str):
            return Tag(name=value)
        return value


@dataclasses.dataclass
class Post:
    tags: typing.Annotated[typing.List[Tag], CastWith(TagCaster)]


@dataclasses.dataclass
class Note:
    label: str
    payload: typing.Any = None
    extras: dict = dataclasses.field(default_factory=dict)


class Connection:
    host: str
    retries: int

    def __init__(self, host: str, retries: int = 3):
        raise AssertionError("constructor must not run")


class Account:
    login: str
    nickname: str = "anon"
    email: str
    age: int


@dataclasses.dataclass(frozen=True)
class Coordinate:
    lat: float
    lng: float
    label: str = ""


class Secret:
    visible: str
    hidden: str

    @classmethod
    def __describe__(cls):
        return PlainTypeDescriptor(cls, [ClassFieldDescriptor("visible", str, cls)])


class Broken:
    ghost: "Nowhere"  # noqa: F821


@dataclasses.dataclass
class Meal:
    dish: typing.Annotated[str, CastWith(ExplodingCaster)]


@dataclasses.dataclass
class Address:
    city: str
    zip: str


@dataclasses.dataclass
class Customer:
    name: str
    address: Address


@dataclasses.dataclass
class Point:
    x: int
    y: float
    label: str
    visible: bool = True


class Color(enum.Enum):
    RED = "red"
    GREEN = "green"


@dataclasses.dataclass
class Swatch:
    color: Color
    printed_on: typing.Annotated[datetime.date, DateFormat("%d/%m/%Y")]
    seen_at: typing.Optional[datetime.datetime] = None


@dataclasses.dataclass
class Signup:
    username: typing.Annotated[str, Length(min=3, max=16), Matches(r"[a-z0-9_]+")]
    age: typing.Annotated[int, Between(13, 130)]
    bio: typing.Annotated[typing.Optional[str], NotEmpty()] = None


@dataclasses.dataclass
class BlogPost:
    title: str
    comments: typing.List["Comment"] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class Comment:
    text: str
    blogpost: typing.Optional[BlogPost] = None
    blog_post: typing.Optional[BlogPost] = None


@dataclasses.dataclass
class Profile:
    name: str
    age: typing.Optional[int] = None
    seen_at: typing.Optional[datetime.datetime] = None


@dataclasses.dataclass(frozen=True)
class Badge:
    name: str


@dataclasses.dataclass
class Member:
    badges: typing.Set[Badge] = dataclasses.field(default_factory=set)


@dataclasses.dataclass
class Sticker:
    name: str


@dataclasses.dataclass
class Album:
    stickers: typing.Set[Sticker] = dataclasses.field(default_factory=set)


class TestObjectMapper:
    @pytest.fixture
    def validator(self) -> RecordingValidator:
        return RecordingValidator()

    @pytest.fixture
    def mapper(self, validator):
        return object_mapper_with_defaults(validator=validator)

    def test_can_handle(self, mapper):
        assert mapper.can_handle({}, Author)
        assert mapper.can_handle({}, Author(name="a"))
        assert not mapper.can_handle([], Author)
        assert not mapper.can_handle("name", Author)
        assert not mapper.can_handle({}, None)
        assert not mapper.can_handle({}, int)
        assert not mapper.can_handle({}, 1)

    def test_map_flat(self, mapper, validator):
        result = mapper.map({"title": "Timeline Taxi", "pages": "120"}, Book)
        assert isinstance(result, Book)
        assert result.title == "Timeline Taxi"
        assert result.pages == 120
        assert result.author is None
        assert validator.validated == [result]

    def test_map_defaults(self, mapper):
        a = mapper.map({"name": "a"}, Author)
        b = mapper.map({"name": "b"}, Author)
        assert a.books == []
        assert b.books == []
        assert a.books is not b.books

    def test_map_constructor_promoted_default(self, mapper):
        result = mapper.map({"host": "db"}, Connection)
        assert result.host == "db"
        assert result.retries == 3

    def test_map_missing_values(self, mapper, validator):
        with pytest.raises(MissingValuesException) as e:
            mapper.map({"nickname": "x", "age": 3}, Account)
        assert e.value.target is Account
        assert e.value.names == ("login", "email")
        assert str(e.value) == "could not map Account, missing values for login, and email"
        assert validator.validated == []

    def test_map_missing_values_in_declaration_order(self, mapper):
        with pytest.raises(MissingValuesException) as e:
            mapper.map({}, Account)
        assert e.value.names == ("login", "email", "age")

    def test_map_missing_values_nested(self, mapper):
        with pytest.raises(MissingValuesException) as e:
            mapper.map({"name": "a", "books": [{"pages": 3}]}, Author)
        assert e.value.target is Book
        assert e.value.names == ("title",)

    def test_map_inverse_to_one(self, mapper):
        result = mapper.map({"name": "g", "ward": {"name": "w"}}, Guardian)
        assert result.ward.name == "w"
        assert result.ward.guardian is result
        assert result.ward.owner is None

    def test_map_inverse_to_many(self, mapper):
        result = mapper.map({"name": "g", "ward": {"name": "w"}}, Guardian)
        assert len(result.ward.guardians) == 1
        assert result.ward.guardians[0] is result

    def test_map_inverse_raw_keys_win(self, mapper):
        result = mapper.map({"name": "g", "ward": {"name": "w", "guardian": None}}, Guardian)
        assert result.ward.guardian is None
        assert result.ward.guardians[0] is result

    def test_map_inverse_in_sequence(self, mapper):
        result = mapper.map(
            {"name": "Brent", "books": [{"title": "a"}, {"title": "b"}]},
            Author,
        )
        assert [book.title for book in result.books] == ["a", "b"]
        assert all(book.author is result for book in result.books)

    def test_map_inverse_keyed_by_declaring_type(self, mapper):
        result = mapper.map({"label": "oak", "entries": [{"name": "e"}]}, Bookcase)
        assert result.label == "oak"
        assert result.entries[0].shelf is result
        assert result.entries[0].bookcase is None

    def test_map_sequence_of_objects(self, mapper):
        result = mapper.map({"items": [{"x": 1}, {"x": "2"}]}, Order)
        assert [type(item) for item in result.items] == [Item, Item]
        assert [item.x for item in result.items] == [1, 2]

    def test_map_sequence_keeps_tuple_container(self, mapper):
        result = mapper.map({"items": [{"x": 1}, {"x": 2}]}, Crate)
        assert result.items == (Item(x=1), Item(x=2))

    def test_map_sequence_passes_non_mappings_through(self, mapper):
        item = Item(x=7)
        result = mapper.map({"items": [item, {"x": 8}]}, Order)
        assert result.items[0] is item
        assert result.items[1].x == 8

    def test_map_sequence_casts_non_mappings(self, mapper):
        result = mapper.map({"tags": ["a", {"name": "b"}]}, Post)
        assert result.tags == [Tag(name="a"), Tag(name="b")]

    def test_map_sequence_without_element_type(self, mapper):
        notes = [{"x": 1}, "y"]
        result = mapper.map({"items": [], "notes": notes}, Order)
        assert result.items == []
        assert result.notes == notes

    def test_map_builtin_field_given_mapping(self, mapper):
        result = mapper.map({"label": {"a": 1}, "payload": {"b": 2}, "extras": {"c": 3}}, Note)
        assert result.label == {"a": 1}
        assert result.payload == {"b": 2}
        assert result.extras == {"c": 3}

    def test_map_caster_precedence(self, mapper):
        result = mapper.map({"code": "MiXed", "alt_code": "MiXed"}, Coupon)
        assert result.code == "MIXED"
        assert result.alt_code == "mixed"

    def test_map_type_caster_sees_merged_mapping(self, mapper):
        result = mapper.map({"owner": {"full_name": "Ann"}}, Pet)
        assert isinstance(result.owner, Owner)
        assert result.owner.name == "Ann"

    def test_map_none_into_optional_object(self, mapper):
        result = mapper.map({"title": "t", "author": None}, Book)
        assert result.author is None

    def test_map_into_instance(self, mapper, validator):
        book = Book(title="old", pages=10)
        result = mapper.map({"title": "new"}, book)
        assert result is book
        assert book.title == "new"
        assert book.pages == 10
        assert validator.validated == [book]

    def test_map_frozen(self, mapper):
        result = mapper.map({"lat": "1.5", "lng": 2}, Coordinate)
        assert result == Coordinate(lat=1.5, lng=2.0)

    def test_map_describable(self, mapper):
        result = mapper.map({"visible": "a", "hidden": "b"}, Secret)
        assert result.visible == "a"
        assert not hasattr(result, "hidden")

    def test_map_unresolvable(self, mapper, validator):
        with pytest.raises(UnresolvableTypeError):
            mapper.map({"ghost": 1}, Broken)
        with pytest.raises(UnresolvableTypeError):
            mapper.map({}, int)
        assert validator.validated == []

    def test_map_non_mapping_source(self, mapper):
        with pytest.raises(TypeError):
            mapper.map([("x", 1)], Item)

    def test_map_casting_error(self, mapper, validator):
        with pytest.raises(CastingError) as e:
            mapper.map({"title": "t", "pages": "many"}, Book)
        assert e.value.value == "many"
        assert validator.validated == []

    def test_map_casting_error_from_user_caster(self, mapper):
        with pytest.raises(CastingError) as e:
            mapper.map({"dish": "soup"}, Meal)
        assert isinstance(e.value.__cause__, ValueError)
        assert e.value.field is not None
        assert e.value.field.name == "dish"

    def test_map_casting_error_nested(self, mapper):
        with pytest.raises(CastingError):
            mapper.map({"items": [{"x": 1}, {"x": "two"}]}, Order)

    def test_map_unwrap(self, mapper):
        result = mapper.map(
            {"name": "Z", "address.city": "Paris", "address.zip": "75001"}, Customer
        )
        assert result.address == Address(city="Paris", zip="75001")

    def test_map_unwrap_custom_delimiter(self, validator):
        mapper = object_mapper_with_defaults(validator=validator, delimiter="__")
        result = mapper.map(
            {"name": "Z", "address__city": "Oslo", "address__zip": "0150"}, Customer
        )
        assert result.address == Address(city="Oslo", zip="0150")

    def test_map_round_trip(self, mapper):
        source = {"x": 1, "y": 2.5, "label": "p", "visible": False}
        assert dataclasses.asdict(mapper.map(source, Point)) == source

    def test_map_builtin_kinds(self, mapper):
        result = mapper.map(
            {"color": "GREEN", "printed_on": "24/12/2020", "seen_at": "2020-12-24T10:00:00"},
            Swatch,
        )
        assert result.color is Color.GREEN
        assert result.printed_on == datetime.date(2020, 12, 24)
        assert result.seen_at == datetime.datetime(2020, 12, 24, 10, 0, 0)

    def test_map_validates_after_population(self):
        mapper = object_mapper_with_defaults(
            validator=RejectingValidator(lambda target: ValidationFailure(target, {}))
        )
        with pytest.raises(ValidationFailure) as e:
            mapper.map({"title": "t"}, Book)
        assert e.value.target.title == "t"

    def test_map_validates_nested_first(self, mapper, validator):
        result = mapper.map({"name": "a", "books": [{"title": "x"}, {"title": "y"}]}, Author)
        assert len(validator.validated) == 3
        assert validator.validated[0] is result.books[0]
        assert validator.validated[1] is result.books[1]
        assert validator.validated[2] is result

    def test_map_with_rule_validator(self):
        mapper = object_mapper_with_defaults()
        result = mapper.map({"username": "brent_99", "age": "30"}, Signup)
        assert result.username == "brent_99"
        assert result.age == 30
        assert result.bio is None
        with pytest.raises(ValidationFailure) as e:
            mapper.map({"username": "X!", "age": 9, "bio": " "}, Signup)
        assert set(e.value.failing_rules) == {"username", "age", "bio"}
        assert [type(r) for r in e.value.failing_rules["username"]] == [Length, Matches]

    def test_map_many(self, mapper):
        result = mapper.map_many([{"x": 1}, {"x": 2}, {"x": 3}], Item)
        assert [item.x for item in result] == [1, 2, 3]

    def test_map_inverse_multi_word_class(self, mapper):
        result = mapper.map({"title": "t", "comments": [{"text": "c"}]}, BlogPost)
        assert result.comments[0].blogpost is result
        assert result.comments[0].blog_post is None

    def test_map_inverse_snake_case_convention(self, validator):
        mapper = object_mapper_with_defaults(
            validator=validator, naming_convention=SnakeCaseNamingConventionImpl()
        )
        result = mapper.map({"title": "t", "comments": [{"text": "c"}]}, BlogPost)
        assert result.comments[0].blog_post is result
        assert result.comments[0].blogpost is None

    def test_map_explicit_none_into_nullable_fields(self, mapper):
        result = mapper.map({"name": "a", "age": None, "seen_at": None}, Profile)
        assert result.age is None
        assert result.seen_at is None

    def test_map_explicit_none_into_non_nullable_field(self, mapper):
        with pytest.raises(CastingError) as e:
            mapper.map({"title": "t", "pages": None}, Book)
        assert e.value.value is None

    def test_map_sequence_keeps_set_container(self, mapper):
        result = mapper.map({"badges": [{"name": "a"}, {"name": "b"}, {"name": "a"}]}, Member)
        assert result.badges == {Badge(name="a"), Badge(name="b")}

    def test_map_set_of_unhashable_elements(self, mapper, validator):
        with pytest.raises(InvalidDeclarationError):
            mapper.map({"stickers": [{"name": "a"}]}, Album)
        assert validator.validated == []

    def test_map_missing_values_keeps_partial_state(self, mapper, validator):
        book = Book(title="old", pages=1)
        with pytest.raises(MissingValuesException) as e:
            mapper.map({"pages": "5"}, book)
        assert e.value.names == ("title",)
        assert book.pages == 5
        assert book.title == "old"
        assert validator.validated == []

    def test_map_casting_error_keeps_partial_state(self, mapper, validator):
        book = Book(title="old", pages=1)
        with pytest.raises(CastingError):
            mapper.map({"title": "new", "pages": "many"}, book)
        assert book.title == "new"
        assert book.pages == 1
        assert validator.validated == []
