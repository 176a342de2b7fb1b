"""Flatten Notion's typed page properties into plain values."""

from typing import Any, Dict, List, Optional


def plain_text(rich_text: Optional[List[Dict[str, Any]]]) -> str:
    """Join the plain text of a rich text array."""
    if not rich_text:
        return ""
    return "".join(part.get("plain_text", "") for part in rich_text)


def _user_name(user: Dict[str, Any]) -> str:
    return user.get("name") or user.get("id", "")


def _option_name(option: Optional[Dict[str, Any]]) -> Optional[str]:
    if not option:
        return None
    return option.get("name")


def _file_url(file_obj: Dict[str, Any]) -> str:
    kind = file_obj.get("type", "external")
    return file_obj.get(kind, {}).get("url", "")


def property_value(prop: Dict[str, Any]) -> Any:
    """
    Return the plain value of a single typed property.

    Args:
        prop: Property payload, e.g. ``{"type": "select", "select": {...}}``

    Returns:
        String, number, bool, list, or None depending on the property type.
        Unknown types return their raw typed payload.
    """
    kind = prop.get("type")
    value = prop.get(kind) if kind else None

    if kind in ("title", "rich_text"):
        return plain_text(value)
    if kind in ("select", "status"):
        return _option_name(value)
    if kind == "multi_select":
        return [option.get("name") for option in value or []]
    if kind == "date":
        return value.get("start") if value else None
    if kind == "people":
        return [_user_name(user) for user in value or []]
    if kind in ("created_by", "last_edited_by"):
        return _user_name(value) if value else None
    if kind == "files":
        return [_file_url(f) for f in value or []]
    if kind == "relation":
        return [rel.get("id") for rel in value or []]
    if kind == "formula":
        if not value:
            return None
        inner = value.get(value.get("type"))
        if value.get("type") == "date":
            return inner.get("start") if inner else None
        return inner
    if kind == "rollup":
        if not value:
            return None
        rollup_type = value.get("type")
        if rollup_type == "array":
            return [property_value(item) for item in value.get("array", [])]
        if rollup_type == "date":
            inner = value.get("date")
            return inner.get("start") if inner else None
        return value.get(rollup_type)
    if kind == "unique_id":
        if not value:
            return None
        prefix = value.get("prefix")
        number = value.get("number")
        return f"{prefix}-{number}" if prefix else number
    # number, checkbox, url, email, phone_number and timestamps are already plain
    return value


def normalize_properties(properties: Dict[str, Any]) -> Dict[str, Any]:
    """
    Map every property name to its plain value.

    If no property is literally named ``title``, the title-type property
    is also exposed under ``title``.
    """
    normalized: Dict[str, Any] = {}
    title: Optional[str] = None
    for name, prop in properties.items():
        if not isinstance(prop, dict):
            normalized[name] = prop
            continue
        normalized[name] = property_value(prop)
        if prop.get("type") == "title" and title is None:
            title = normalized[name]

    if "title" not in normalized and title is not None:
        normalized["title"] = title
    return normalized
