from __future__ import annotations

from typing import Any, Callable, TypeVar

from documents.document_models import JsonValue, KeyPath

Acc = TypeVar("Acc")
Reducer = Callable[[Acc, JsonValue, KeyPath], Acc]


def walk(document: JsonValue, reducer: Reducer, initial: Acc) -> Acc:
    """
    Fold `reducer` over every value in a JSON tree, depth-first and pre-order.

    The root is visited first with the empty path (). Mapping entries follow
    insertion order and list elements follow index order, so the visit order
    is deterministic. Strings are leaves. The document is never modified;
    any side effects belong to the reducer.
    """
    return _visit(document, (), reducer, initial)


def _visit(value: JsonValue, path: KeyPath, reducer: Reducer, acc: Any) -> Any:
    acc = reducer(acc, value, path)
    if isinstance(value, dict):
        for key, child in value.items():
            acc = _visit(child, path + (key,), reducer, acc)
    elif isinstance(value, list):
        for index, child in enumerate(value):
            acc = _visit(child, path + (index,), reducer, acc)
    return acc
