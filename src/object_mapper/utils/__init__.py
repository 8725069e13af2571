from .formatting import english_enumerate, snake_case  # noqa
from .typing import (  # noqa
    assert_not_none,
    is_builtin_kind,
    strip_annotated,
    strip_optional,
)
from .unwrap import unwrap  # noqa
