"""Configuration errors."""

from pydantic import ValidationError


class ConfigurationError(Exception):
    """Configuration validation error."""

    pass


def format_validation_error(error: ValidationError, prefix: str = "Configuration validation failed") -> str:
    """Render a pydantic ValidationError as one line per offending field

    Args:
        error: Validation error raised by a config model
        prefix: First line of the message

    Returns:
        Human readable message
    """
    lines = []
    for item in error.errors():
        field = ".".join(str(x) for x in item["loc"]) or "config"
        lines.append(f"  - {field}: {item['msg']}")
    return f"{prefix}:\n" + "\n".join(lines)
