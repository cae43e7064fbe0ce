"""Payload guards for *arr API responses."""

from __future__ import annotations

from wantarr.errors import BackendResponseError


def expect_dict(value: object, context: str) -> dict:
    if isinstance(value, dict):
        return value
    value_type = type(value).__name__
    raise BackendResponseError(f"{context} has unexpected type '{value_type}'")


def expect_list(value: object, context: str) -> list:
    if isinstance(value, list):
        return value
    value_type = type(value).__name__
    raise BackendResponseError(f"{context} has unexpected type '{value_type}'")


def optional_list_of_dicts(container: dict, key: str, context: str) -> list[dict]:
    value = container.get(key, [])
    if value is None:
        return []
    values = expect_list(value, f"{context}.{key}")
    output: list[dict] = []
    for idx, item in enumerate(values):
        output.append(expect_dict(item, f"{context}.{key}[{idx}]"))
    return output


def require_int(container: dict, key: str, context: str) -> int:
    value = container.get(key)
    # bool is an int subclass but never a valid count or id
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    raise BackendResponseError(f"{context}.{key} expected integer value, got {value!r}")


def required_list_of_dicts(container: dict, key: str, context: str) -> list[dict]:
    if key not in container or container[key] is None:
        raise BackendResponseError(f"{context} is missing required '{key}' list")
    return optional_list_of_dicts(container, key, context)


def require_bool(container: dict, key: str, context: str) -> bool:
    value = container.get(key)
    if isinstance(value, bool):
        return value
    raise BackendResponseError(f"{context}.{key} expected boolean value, got {value!r}")
