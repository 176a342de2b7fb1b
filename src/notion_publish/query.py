"""Sort and filter options for Notion database queries."""

import copy
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

logger = logging.getLogger(__name__)

# Status value the default filter publishes
PUBLISHED_STATUS = "已发布"


class SortPreset(str, Enum):
    """Named shorthands for common sort rules."""
    DATE_DESC = "dateDesc"
    DATE_ASC = "dateAsc"
    SORT_DESC = "sortDesc"
    SORT_ASC = "sortAsc"
    CREATE_TIME_DESC = "createTimeDesc"
    CREATE_TIME_ASC = "createTimeAsc"
    UPDATE_TIME_DESC = "updateTimeDesc"
    UPDATE_TIME_ASC = "updateTimeAsc"


def _property_rule(name: str, direction: str) -> Dict[str, str]:
    return {"property": name, "direction": direction}


def _timestamp_rule(timestamp: str, direction: str) -> Dict[str, str]:
    return {"timestamp": timestamp, "direction": direction}


DEFAULT_SORT_RULE = _timestamp_rule("created_time", "descending")

PRESET_RULES: Dict[SortPreset, Dict[str, str]] = {
    SortPreset.DATE_DESC: _property_rule("date", "descending"),
    SortPreset.DATE_ASC: _property_rule("date", "ascending"),
    SortPreset.SORT_DESC: _property_rule("sort", "descending"),
    SortPreset.SORT_ASC: _property_rule("sort", "ascending"),
    SortPreset.CREATE_TIME_DESC: _timestamp_rule("created_time", "descending"),
    SortPreset.CREATE_TIME_ASC: _timestamp_rule("created_time", "ascending"),
    SortPreset.UPDATE_TIME_DESC: _timestamp_rule("last_edited_time", "descending"),
    SortPreset.UPDATE_TIME_ASC: _timestamp_rule("last_edited_time", "ascending"),
}


# Sort variants

@dataclass(frozen=True)
class NoSort:
    """Send no sorts; Notion returns its own order."""

    def to_query(self) -> Optional[List[Dict[str, Any]]]:
        return None


@dataclass(frozen=True)
class DefaultSort:
    """Newest pages first."""

    def to_query(self) -> Optional[List[Dict[str, Any]]]:
        return [dict(DEFAULT_SORT_RULE)]


@dataclass(frozen=True)
class PresetSort:
    """A named preset; unknown names fall back to the default sort."""
    name: str

    def to_query(self) -> Optional[List[Dict[str, Any]]]:
        try:
            preset = SortPreset(self.name)
        except ValueError:
            logger.warning(
                f"Unknown sort preset '{self.name}', using created_time descending"
            )
            return [dict(DEFAULT_SORT_RULE)]
        return [dict(PRESET_RULES[preset])]


@dataclass(frozen=True)
class CustomSort:
    """Explicit Notion sort rules, sent unchanged."""
    rules: Tuple[Mapping[str, Any], ...] = field(default_factory=tuple)

    def to_query(self) -> Optional[List[Dict[str, Any]]]:
        return copy.deepcopy([dict(rule) for rule in self.rules])


SortSpec = Union[NoSort, DefaultSort, PresetSort, CustomSort]


# Filter variants

@dataclass(frozen=True)
class NoFilter:
    """Query every page in the database."""

    def to_query(self) -> Optional[Dict[str, Any]]:
        return None


@dataclass(frozen=True)
class DefaultFilter:
    """Only pages whose status select is the published value."""

    def to_query(self) -> Optional[Dict[str, Any]]:
        return {
            "property": "status",
            "select": {"equals": PUBLISHED_STATUS},
        }


@dataclass(frozen=True)
class CustomFilter:
    """An explicit Notion filter object, sent unchanged."""
    filter: Mapping[str, Any]

    def to_query(self) -> Optional[Dict[str, Any]]:
        return copy.deepcopy(dict(self.filter))


FilterSpec = Union[NoFilter, DefaultFilter, CustomFilter]

_SORT_TYPES = (NoSort, DefaultSort, PresetSort, CustomSort)
_FILTER_TYPES = (NoFilter, DefaultFilter, CustomFilter)


def parse_sorts(value: Any) -> SortSpec:
    """
    Turn a raw sorts option into a sort variant.

    Args:
        value: None/True (default), False (none), a preset name,
            a list of sort rule mappings, or an existing variant

    Returns:
        The matching sort variant

    Raises:
        TypeError: If the value has none of the accepted shapes
    """
    if isinstance(value, _SORT_TYPES):
        return value
    if value is None or value is True:
        return DefaultSort()
    if value is False:
        return NoSort()
    if isinstance(value, SortPreset):
        return PresetSort(value.value)
    if isinstance(value, str):
        return PresetSort(value)
    if isinstance(value, (list, tuple)):
        if not all(isinstance(rule, Mapping) for rule in value):
            raise TypeError("Every custom sort rule must be a mapping")
        return CustomSort(tuple(copy.deepcopy(list(value))))
    raise TypeError(f"Unsupported sorts option: {value!r}")


def parse_filter(value: Any) -> FilterSpec:
    """
    Turn a raw filter option into a filter variant.

    An empty mapping counts as unset.

    Raises:
        TypeError: If the value is neither a boolean, None, nor a mapping
    """
    if isinstance(value, _FILTER_TYPES):
        return value
    if value is False:
        return NoFilter()
    if value is None or value is True:
        return DefaultFilter()
    if isinstance(value, Mapping):
        return CustomFilter(copy.deepcopy(dict(value))) if value else DefaultFilter()
    raise TypeError(f"Unsupported filter option: {value!r}")


def resolve_sorts(spec: SortSpec) -> Optional[List[Dict[str, Any]]]:
    """Return the Notion ``sorts`` parameter for a sort variant, or None."""
    return spec.to_query()


def resolve_filter(spec: FilterSpec) -> Optional[Dict[str, Any]]:
    """Return the Notion ``filter`` parameter for a filter variant, or None."""
    return spec.to_query()
