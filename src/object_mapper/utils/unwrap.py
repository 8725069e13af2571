import collections.abc
import typing


def _set(
    target: typing.MutableMapping[typing.Any, typing.Any],
    path: typing.Sequence[str],
    value: typing.Any,
) -> None:
    head, rest = path[0], path[1:]
    if not rest:
        target[head] = value
        return
    sub = target.get(head)
    if isinstance(sub, collections.abc.Mapping):
        sub = dict(sub)
    else:
        sub = {}
    _set(sub, rest, value)
    target[head] = sub


def unwrap(
    data: typing.Mapping[typing.Any, typing.Any], delimiter: str = "."
) -> typing.Dict[typing.Any, typing.Any]:
    """
    Expands delimited compound keys into nested mappings.

    >>> unwrap({"author.name": "Brent", "author.age": 3, "title": "x"})
    {'author': {'name': 'Brent', 'age': 3}, 'title': 'x'}

    A plain key holding a mapping is merged with compound keys sharing its
    prefix; a later plain key replaces whatever was collected before it.
    Values themselves are never descended into.
    """
    result: typing.Dict[typing.Any, typing.Any] = {}
    for k, v in data.items():
        if isinstance(k, str) and delimiter and delimiter in k:
            _set(result, k.split(delimiter), v)
        else:
            result[k] = v
    return result
