from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import IO, Any, Callable, ClassVar, TypeVar
from xml.parsers.expat import ExpatError

from ...exceptions import InvalidDataError
from ...settings import settings
from ...utils import dict2xml, element_text, find_element, local_name, xml2dict

logger = logging.getLogger(__name__)

E = TypeVar("E", bound="DescriptionElement")


class PropertyStyle(str, Enum):
    """How property bag entries are written out.

    Producers disagree here; both styles are read back. In attribute style a
    key that clashes with an attribute the element uses itself (``enabled``
    on a device) is still written as a child element.
    """

    ELEMENT = "element"
    ATTRIBUTE = "attribute"


def parse_document(source: str | bytes | IO[bytes]) -> dict[str, Any]:
    try:
        return xml2dict(source)
    except ExpatError as exc:
        raise InvalidDataError(f"malformed description document: {exc}") from exc


def read_collection(value, item_name: str, factory: Callable[[], E], add: Callable[[E], None]):
    """Fill a collection from a ``deviceList``-like wrapper element."""
    for wrapper in value if isinstance(value, list) else [value]:
        if not isinstance(wrapper, dict):
            continue
        for key, items in wrapper.items():
            if key.startswith(("@", "#")) or local_name(key) != item_name:
                continue
            for item in items if isinstance(items, list) else [items]:
                entity = factory()
                entity.read_dict(item)
                add(entity)


@dataclass(eq=False)
class DescriptionElement:
    """An element of a device description backed by a string property bag."""

    ELEMENT_NAME: ClassVar[str] = ""
    RESERVED_ATTRIBUTES: ClassVar[frozenset[str]] = frozenset({"xmlns"})

    properties: dict[str, str] = field(default_factory=dict)

    def get_property(self, key: str) -> str:
        return self.properties.get(key, "")

    def set_property(self, key: str, value: str | None):
        if value is None:
            self.properties.pop(key, None)
        else:
            self.properties[key] = str(value)

    @classmethod
    def from_xml(cls: type[E], source: str | bytes | IO[bytes]) -> E:
        found, node = find_element(parse_document(source), cls.ELEMENT_NAME)
        if not found:
            raise InvalidDataError(f"no <{cls.ELEMENT_NAME}> element in document")

        entity = cls()
        entity.read_dict(node)
        return entity

    def element_handlers(self) -> dict[str, Callable[[Any], None]]:
        return {}

    def read_dict(self, node):
        if not isinstance(node, dict):
            return

        handlers = self.element_handlers()
        for key, value in node.items():
            if key.startswith(("@", "#")):
                continue
            name = local_name(key)
            if name in handlers:
                handlers[name](value)
            elif name not in self.properties:
                self.properties[name] = element_text(value)

        for key, value in node.items():
            # namespace declarations come through as an "@xmlns" mapping
            if key.startswith("@") and key != "@xmlns" and isinstance(value, str):
                self.read_attribute(local_name(key), value)

    def read_attribute(self, name: str, value: str):
        if name not in self.properties:
            self.properties[name] = value

    def to_dict(self, property_style: PropertyStyle | str | None = None) -> dict[str, Any]:
        style = PropertyStyle(property_style or settings.property_style)

        node: dict[str, Any] = {}
        self.write_attributes(node)
        for key, value in self.properties.items():
            if style is PropertyStyle.ATTRIBUTE and key not in self.RESERVED_ATTRIBUTES:
                node[f"@{key}"] = value
            else:
                node[key] = value
        self.write_children(node, style)
        return node

    def write_attributes(self, node: dict[str, Any]):
        pass

    def write_children(self, node: dict[str, Any], style: PropertyStyle):
        pass

    def to_xml(
        self, property_style: PropertyStyle | str | None = None, pretty: bool = False
    ) -> str:
        return dict2xml({self.ELEMENT_NAME: self.to_dict(property_style)}, pretty=pretty)
