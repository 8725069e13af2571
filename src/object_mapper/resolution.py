import dataclasses
import typing

T = typing.TypeVar("T")


class NotApplicableType:
    """
    Signals that a resolution strategy does not apply to a field, so the
    next one should be attempted.  It is never assigned to a field.
    """

    _singleton: typing.ClassVar[typing.Optional["NotApplicableType"]] = None

    def __bool__(self):
        return False

    def __repr__(self) -> str:
        return "NOT_APPLICABLE"

    def __new__(cls) -> "NotApplicableType":
        if cls._singleton is None:
            cls._singleton = object.__new__(cls)
        return cls._singleton


NOT_APPLICABLE = NotApplicableType()


@dataclasses.dataclass(frozen=True)
class Resolved(typing.Generic[T]):
    """
    Wraps a value that a resolution strategy produced, ``None`` included.
    """

    value: T


Resolution = typing.Union[NotApplicableType, Resolved[T]]
