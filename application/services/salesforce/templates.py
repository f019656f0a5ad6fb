"""Ready-made package.xml manifests."""

from typing import Dict, Sequence

TEMPLATE_API_VERSION = "60.0"


def build_package_xml(types: Dict[str, Sequence[str]], version: str = TEMPLATE_API_VERSION) -> str:
    """Render a package.xml for ``{type name: members}``."""
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<Package xmlns="http://soap.sforce.com/2006/04/metadata">',
    ]
    for type_name, members in types.items():
        lines.append("    <types>")
        for member in members:
            lines.append(f"        <members>{member}</members>")
        lines.append(f"        <name>{type_name}</name>")
        lines.append("    </types>")
    lines.append(f"    <version>{version}</version>")
    lines.append("</Package>")
    return "\n".join(lines)


def _all(*type_names: str) -> str:
    return build_package_xml({name: ["*"] for name in type_names})


PACKAGE_TEMPLATES: Dict[str, str] = {
    "all-apex": _all("ApexClass", "ApexTrigger"),
    "custom-objects": _all("CustomObject", "CustomField", "ValidationRule"),
    "lwc-aura": _all("LightningComponentBundle", "AuraDefinitionBundle"),
    "full-metadata": _all(
        "ApexClass",
        "ApexTrigger",
        "CustomObject",
        "LightningComponentBundle",
        "AuraDefinitionBundle",
        "Flow",
        "PermissionSet",
        "Profile",
    ),
    "profiles-permissions": _all("Profile", "PermissionSet", "PermissionSetGroup"),
}


def get_template(name: str) -> str:
    """Return the template called ``name``.

    Raises:
        KeyError: If no such template exists
    """
    try:
        return PACKAGE_TEMPLATES[name]
    except KeyError:
        raise KeyError(
            f"Unknown package template {name!r}. Available: {', '.join(sorted(PACKAGE_TEMPLATES))}"
        ) from None
