"""Human-friendly output formatter - renders a resolution result as readable text."""

import os
from typing import Any, Dict, List, Optional
from ..contracts.descriptors import ResolutionResult, ResourceDescriptor, ResourceType

SECRET_FIELDS = ("password", "root_password", "generated_user_password")


def _use_ascii(ascii_mode: Optional[bool] = None) -> bool:
    """Resolve whether to use ASCII output (checked at format time)."""
    if ascii_mode is not None:
        return bool(ascii_mode)
    return os.environ.get("SQLBLUEPRINT_ASCII", "").lower() in ("1", "true", "yes")


def _box(title: str, width: int = 65, ascii_mode: bool = False) -> List[str]:
    """Return box-drawing header lines."""
    b = {"tl": "+", "tr": "+", "bl": "+", "br": "+", "h": "-", "v": "|"} if ascii_mode else {
        "tl": "┌", "tr": "┐", "bl": "└", "br": "┘", "h": "─", "v": "│"
    }
    h = b["h"] * (width - 2)
    return [
        b["tl"] + h + b["tr"],
        f"{b['v']} {title:<{width - 4}} {b['v']}",
        b["bl"] + h + b["br"],
        "",
    ]


def _section(title: str, width: int = 65) -> List[str]:
    h = "-" * width
    return [h, title.center(width), h]


def _mask(value: Optional[str]) -> str:
    if not value:
        return "-"
    return "*" * 8


def _describe(descriptor: ResourceDescriptor) -> str:
    """One-line summary of a descriptor's spec."""
    spec: Dict[str, Any] = descriptor.spec.model_dump()
    resource_type = descriptor.type
    if resource_type == ResourceType.DEPENDENCY_SENTINEL.value:
        return f"trigger={spec['trigger']}"
    if resource_type == ResourceType.SQL_DATABASE_INSTANCE.value:
        return f"{spec['name']} ({spec['database_version']}, {spec['tier']}, {spec['region']})"
    if resource_type == ResourceType.PROJECT_IAM_MEMBER.value:
        return f"{spec['member']} -> {spec['role']}"
    if resource_type == ResourceType.SQL_USER.value and "type" in spec:
        return f"{spec['name']} ({spec['type']})"
    if resource_type == ResourceType.SQL_USER.value:
        return f"{spec['name']} (password: {_mask(spec.get('password'))})"
    return spec.get("name", "")


def format_human_friendly(result: ResolutionResult, ascii_mode: Optional[bool] = None) -> str:
    """
    Render a ResolutionResult for terminal output. Secrets are masked.

    Args:
        result: Resolution result
        ascii_mode: Force ASCII box drawing (defaults to SQLBLUEPRINT_ASCII env)

    Returns:
        Multi-line string
    """
    ascii_mode = _use_ascii(ascii_mode)
    outputs = result.outputs
    lines = _box(f"Resolved instance: {outputs.instance_name}", ascii_mode=ascii_mode)

    lines.append(f"Connection name:   {outputs.instance_connection_name}")
    lines.append(f"Resources:         {len(result.resources)}")
    if outputs.generated_user_password:
        lines.append(f"Default user:      generated password {_mask(outputs.generated_user_password)}")
    if outputs.additional_user_names:
        lines.append(f"Additional users:  {', '.join(outputs.additional_user_names)}")
    if outputs.iam_user_names:
        lines.append(f"IAM users:         {', '.join(outputs.iam_user_names)}")
    lines.append("")

    lines.extend(_section("PROVISIONING ORDER"))
    for index, descriptor in enumerate(result.resources, start=1):
        lines.append(f"{index:>3}. {descriptor.address}")
        lines.append(f"       {_describe(descriptor)}")
        if descriptor.depends_on:
            lines.append(f"       depends on: {', '.join(descriptor.depends_on)}")
        ignored = sorted(descriptor.field_policies)
        if ignored:
            lines.append(f"       ignore drift: {', '.join(ignored)}")
    lines.append("")

    return "\n".join(lines)
