"""Response shape detection for list endpoints of the remote store

Webhook workflows answer in whichever shape their last node produced. Each
strategy below recognizes one shape and returns the raw item list, or None if
the payload is not in that shape. They are tried in order.
"""

from typing import Any, Callable, List, Optional, Sequence

from sales_gateway.domain.exceptions import ParseFailure

ShapeStrategy = Callable[[Any], Optional[List[Any]]]

WRAPPER_KEYS = ("data", "items", "results")


def _is_json_wrapper(item: Any) -> bool:
    return isinstance(item, dict) and isinstance(item.get("json"), dict)


def bare_array(payload: Any) -> Optional[List[Any]]:
    """[{...}, {...}]"""
    if isinstance(payload, list) and not any(_is_json_wrapper(item) for item in payload):
        return payload
    return None


def json_wrappers(payload: Any) -> Optional[List[Any]]:
    """[{"json": {...}}, {"json": {...}}]"""
    if isinstance(payload, list) and payload and all(_is_json_wrapper(item) for item in payload):
        return [item["json"] for item in payload]
    return None


def keyed_array(payload: Any) -> Optional[List[Any]]:
    """{"data": [...]} / {"items": [...]} / {"results": [...]}, items bare or json-wrapped"""
    if not isinstance(payload, dict):
        return None
    for key in WRAPPER_KEYS:
        inner = payload.get(key)
        if isinstance(inner, list):
            return bare_array(inner) if bare_array(inner) is not None else json_wrappers(inner)
    return None


STRATEGIES: Sequence[ShapeStrategy] = (bare_array, keyed_array, json_wrappers)


def unwrap_items(payload: Any, strategies: Sequence[ShapeStrategy] = STRATEGIES) -> List[Any]:
    """
    Return the item list of a list-endpoint payload.

    Raises:
        ParseFailure: no strategy recognized the payload
    """
    for strategy in strategies:
        items = strategy(payload)
        if items is not None:
            return items
    raise ParseFailure(f"Unrecognized response shape: {type(payload).__name__}")
