"""Unit tests for package.xml parsing and templates."""

import pytest

from application.services.salesforce.models.types import PackageType
from application.services.salesforce.package_descriptor import parse_package_xml, validate_package_xml
from application.services.salesforce.templates import PACKAGE_TEMPLATES, get_template
from common.exception.exceptions import ValidationError


class TestParsePackageXml:
    """Test parse_package_xml."""

    def test_namespaced_manifest(self):
        xml = """<?xml version="1.0" encoding="UTF-8"?>
<Package xmlns="http://soap.sforce.com/2006/04/metadata">
    <types>
        <members>Foo</members>
        <members>Bar</members>
        <name>ApexClass</name>
    </types>
    <types>
        <members>*</members>
        <name>ApexTrigger</name>
    </types>
    <version>60.0</version>
</Package>"""

        descriptor = parse_package_xml(xml)

        assert descriptor.version == "60.0"
        assert descriptor.types == (
            PackageType("ApexClass", ("Foo", "Bar")),
            PackageType("ApexTrigger", ("*",)),
        )

    def test_version_falls_back(self):
        descriptor = parse_package_xml(
            "<Package><types><members>*</members><name>Flow</name></types></Package>"
        )
        assert descriptor.version == "58.0"

    def test_entries_without_name_or_members_are_dropped(self):
        xml = (
            "<Package>"
            "<types><members>Foo</members></types>"
            "<types><name>ApexPage</name></types>"
            "<types><members> </members><name>Flow</name></types>"
            "<types><members>*</members><name>ApexClass</name></types>"
            "</Package>"
        )

        descriptor = parse_package_xml(xml)

        assert [t.name for t in descriptor.types] == ["ApexClass"]

    def test_no_types_is_a_validation_error(self):
        with pytest.raises(ValidationError):
            parse_package_xml("<Package><version>60.0</version></Package>")

    def test_malformed_xml_is_a_validation_error(self):
        with pytest.raises(ValidationError, match="Invalid XML format"):
            parse_package_xml("<Package><types>")

    def test_empty_is_a_validation_error(self):
        with pytest.raises(ValidationError, match="cannot be empty"):
            validate_package_xml("   ")


class TestTemplates:
    """Test bundled package.xml templates."""

    @pytest.mark.parametrize("name", sorted(PACKAGE_TEMPLATES))
    def test_every_template_parses(self, name):
        descriptor = parse_package_xml(get_template(name))
        assert descriptor.types
        assert all(t.members == ("*",) for t in descriptor.types)

    def test_unknown_template(self):
        with pytest.raises(KeyError, match="Unknown package template"):
            get_template("nope")
