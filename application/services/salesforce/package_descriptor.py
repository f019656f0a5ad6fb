"""
package.xml parsing.

Turns a metadata manifest into a PackageDescriptor used to build the retrieve
request. Element names are matched without their namespace, so manifests with
or without the metadata xmlns are accepted.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Iterator, List, Optional

from application.services.salesforce.models.types import PackageDescriptor, PackageType
from common.config.config import DEFAULT_PACKAGE_VERSION
from common.exception.exceptions import ValidationError

logger = logging.getLogger(__name__)


def local_name(tag: str) -> str:
    """Strip the ``{namespace}`` part of an ElementTree tag."""
    return tag.rsplit("}", 1)[-1]


def iter_elements(element: ET.Element, name: str) -> Iterator[ET.Element]:
    """Iterate descendants (including ``element``) whose local name is ``name``."""
    for node in element.iter():
        if isinstance(node.tag, str) and local_name(node.tag) == name:
            yield node


def find_element(element: ET.Element, name: str) -> Optional[ET.Element]:
    return next(iter_elements(element, name), None)


def element_text(element: Optional[ET.Element]) -> str:
    if element is None or element.text is None:
        return ""
    return element.text.strip()


def validate_package_xml(xml_content: str) -> ET.Element:
    """Check that ``xml_content`` is non-empty, well-formed XML.

    Returns:
        The parsed root element

    Raises:
        ValidationError: If the content is empty or not well-formed
    """
    if not xml_content or not xml_content.strip():
        raise ValidationError("XML content cannot be empty")
    try:
        return ET.fromstring(xml_content.strip())
    except ET.ParseError as e:
        raise ValidationError(f"Invalid XML format: {e}", detail=str(e)) from e


def parse_package_xml(xml_content: str) -> PackageDescriptor:
    """Parse a package.xml manifest.

    Type entries without a name or without members are dropped. The version
    falls back to DEFAULT_PACKAGE_VERSION when absent.

    Raises:
        ValidationError: If the XML is malformed or declares no usable type
    """
    root = validate_package_xml(xml_content)

    types: List[PackageType] = []
    for type_node in iter_elements(root, "types"):
        name = element_text(find_element(type_node, "name"))
        members = tuple(
            element_text(member)
            for member in iter_elements(type_node, "members")
            if element_text(member)
        )
        if name and members:
            types.append(PackageType(name=name, members=members))
        else:
            logger.warning(f"Skipping package.xml <types> entry without name or members: {name!r}")

    if not types:
        raise ValidationError("package.xml does not declare any metadata types with members")

    version = element_text(find_element(root, "version")) or DEFAULT_PACKAGE_VERSION
    return PackageDescriptor(types=tuple(types), version=version)
