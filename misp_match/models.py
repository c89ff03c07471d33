"""Data models for MISP search results and outbound Wazuh alerts."""

import json
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

from misp_match.errors import ResponseParseError

# Flat mapping written to stdout for Wazuh
OutboundAlert = dict[str, Any]


def _str_field(data: dict, key: str) -> str:
    """Return a scalar field as a string, treating missing/null as empty."""
    value = data.get(key)
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ResponseParseError(f"'{key}' field is not a scalar value")


def _list_field(data: dict, key: str) -> list:
    """Return a list field, treating missing/null as empty."""
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ResponseParseError(f"'{key}' field is not a list")
    return value


def _require_dict(value: Any, what: str) -> dict:
    if not isinstance(value, dict):
        raise ResponseParseError(f"{what} is not an object")
    return value


@dataclass(frozen=True)
class MISPAttribute:
    """A single typed key/value entry of a MISP object."""

    type: str
    object_relation: str
    value: str

    @classmethod
    def from_dict(cls, data: dict) -> "MISPAttribute":
        data = _require_dict(data, "attribute entry")
        return cls(
            type=_str_field(data, "type"),
            object_relation=_str_field(data, "object_relation"),
            value=_str_field(data, "value"),
        )


@dataclass(frozen=True)
class AttributeList:
    """
    Ordered association list of attributes keyed by object relation.

    Lookups are first-match-wins, so duplicate relations resolve to the
    earliest attribute in sequence order.
    """

    items: tuple[MISPAttribute, ...] = ()

    def __iter__(self) -> Iterator[MISPAttribute]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def find_value(self, relation: str) -> tuple[str, bool]:
        """
        Find the value of the first attribute with the given relation.

        Returns:
            (value, True) when found, ("", False) otherwise
        """
        for attr in self.items:
            if attr.object_relation == relation:
                return attr.value, True
        return "", False


@dataclass(frozen=True)
class MISPObject:
    """A named MISP object (e.g. "malware", "malware-analysis")."""

    name: str
    description: str = ""
    comment: str = ""
    attributes: AttributeList = field(default_factory=AttributeList)

    @classmethod
    def from_dict(cls, data: dict) -> "MISPObject":
        data = _require_dict(data, "object entry")
        raw_attrs = _list_field(data, "Attribute")
        return cls(
            name=_str_field(data, "name"),
            description=_str_field(data, "description"),
            comment=_str_field(data, "comment"),
            attributes=AttributeList(
                tuple(MISPAttribute.from_dict(a) for a in raw_attrs)
            ),
        )


@dataclass(frozen=True)
class MISPEvent:
    """A MISP event with its descriptive fields and contained objects."""

    id: str = ""
    uuid: str = ""
    date: str = ""
    threat_level_id: str = ""
    info: str = ""
    attribute_count: str = ""
    objects: tuple[MISPObject, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> "MISPEvent":
        data = _require_dict(data, "Event")
        raw_objects = _list_field(data, "Object")
        return cls(
            id=_str_field(data, "id"),
            uuid=_str_field(data, "uuid"),
            date=_str_field(data, "date"),
            threat_level_id=_str_field(data, "threat_level_id"),
            info=_str_field(data, "info"),
            attribute_count=_str_field(data, "attribute_count"),
            objects=tuple(MISPObject.from_dict(o) for o in raw_objects),
        )

    def get_object(self, name: str) -> Optional[MISPObject]:
        """Return the first object with the given name, or None."""
        for obj in self.objects:
            if obj.name == name:
                return obj
        return None


@dataclass(frozen=True)
class SearchResponse:
    """Result of a MISP restSearch call: a sequence of wrapped events."""

    events: tuple[MISPEvent, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> "SearchResponse":
        entries = _list_field(data, "response")

        events = []
        for entry in entries:
            if not isinstance(entry, dict):
                raise ResponseParseError("response entry is not an object")
            raw_event = entry.get("Event")
            events.append(MISPEvent.from_dict({} if raw_event is None else raw_event))
        return cls(events=tuple(events))

    @classmethod
    def from_json(cls, body: bytes | str) -> "SearchResponse":
        """
        Parse a raw MISP response body.

        Raises:
            ResponseParseError: If the body is not JSON or any level of the
                event structure has the wrong shape
        """
        try:
            data = json.loads(body)
        except ValueError as e:
            raise ResponseParseError(f"invalid JSON in MISP response: {e}") from e

        if not isinstance(data, dict):
            raise ResponseParseError("MISP response is not a JSON object")
        return cls.from_dict(data)

    def is_empty(self) -> bool:
        return not self.events

    def first(self) -> MISPEvent:
        """Return the first matched event."""
        return self.events[0]
