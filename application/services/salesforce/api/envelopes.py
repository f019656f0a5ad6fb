"""
SOAP envelopes for the Salesforce Metadata API.

Builds the ``retrieve``, ``checkStatus`` and ``checkRetrieveStatus`` request
bodies and reads named leaf fields out of the responses.
"""

import xml.etree.ElementTree as ET
from typing import Dict, Optional
from xml.sax.saxutils import escape

from application.services.salesforce.models.types import PackageDescriptor
from application.services.salesforce.package_descriptor import element_text, find_element

ENVELOPE_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<soapenv:Envelope xmlns:soapenv="http://schemas.xmlsoap.org/soap/envelope/" xmlns:met="http://soap.sforce.com/2006/04/metadata">
   <soapenv:Header>
      <met:SessionHeader>
         <met:sessionId>{session_id}</met:sessionId>
      </met:SessionHeader>
   </soapenv:Header>
   <soapenv:Body>
      {body}
   </soapenv:Body>
</soapenv:Envelope>"""


def build_envelope(session_id: str, body: str) -> str:
    return ENVELOPE_TEMPLATE.format(session_id=escape(session_id), body=body)


def build_retrieve_request(session_id: str, descriptor: PackageDescriptor) -> str:
    """Envelope for ``retrieve`` of an unpackaged manifest."""
    types_xml = []
    for package_type in descriptor.types:
        members = "".join(
            f"<met:members>{escape(member)}</met:members>" for member in package_type.members
        )
        types_xml.append(f"<met:types>{members}<met:name>{escape(package_type.name)}</met:name></met:types>")

    version = escape(descriptor.version)
    body = (
        "<met:retrieve>"
        "<met:retrieveRequest>"
        f"<met:apiVersion>{version}</met:apiVersion>"
        "<met:singlePackage>true</met:singlePackage>"
        "<met:unpackaged>"
        f"{''.join(types_xml)}"
        f"<met:version>{version}</met:version>"
        "</met:unpackaged>"
        "</met:retrieveRequest>"
        "</met:retrieve>"
    )
    return build_envelope(session_id, body)


def build_check_status_request(session_id: str, async_id: str) -> str:
    body = (
        "<met:checkStatus>"
        f"<met:asyncProcessId>{escape(async_id)}</met:asyncProcessId>"
        "</met:checkStatus>"
    )
    return build_envelope(session_id, body)


def build_check_retrieve_status_request(session_id: str, async_id: str, include_zip: bool = True) -> str:
    body = (
        "<met:checkRetrieveStatus>"
        f"<met:asyncProcessId>{escape(async_id)}</met:asyncProcessId>"
        f"<met:includeZip>{'true' if include_zip else 'false'}</met:includeZip>"
        "</met:checkRetrieveStatus>"
    )
    return build_envelope(session_id, body)


def parse_response(text: str) -> ET.Element:
    """Parse a SOAP response body.

    Raises:
        ET.ParseError: If the body is not XML
    """
    return ET.fromstring(text)


def read_fields(root: ET.Element, *names: str) -> Dict[str, Optional[str]]:
    """First text value of each named leaf anywhere in the document, or None."""
    fields: Dict[str, Optional[str]] = {}
    for name in names:
        node = find_element(root, name)
        fields[name] = element_text(node) if node is not None else None
    return fields


def read_fault(text: str) -> Optional[str]:
    """``faultstring`` of a SOAP fault body, or None when absent or unparsable."""
    try:
        root = parse_response(text)
    except ET.ParseError:
        return None
    return read_fields(root, "faultstring")["faultstring"]
