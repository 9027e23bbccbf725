from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Generic, Optional, TypeVar


T = TypeVar("T")


@dataclass
class ValidationResult(Generic[T]):
    value: Optional[T]
    error: Optional[str]

    @property
    def is_valid(self) -> bool:
        return self.error is None


def validate_timeout(value: str | None, *, name: str = "Timeout") -> ValidationResult[float]:
    """Blank means "no timeout"; anything else must be a positive number of seconds."""
    if value is None or str(value).strip() == "":
        return ValidationResult(None, None)
    try:
        parsed = float(str(value).strip())
    except ValueError:
        return ValidationResult(None, f"{name} must be a number of seconds")
    if parsed <= 0:
        return ValidationResult(None, f"{name} must be > 0")
    return ValidationResult(parsed, None)


def validate_tool(value: str | None, *, default: str, name: str = "Tool") -> ValidationResult[str]:
    tool = (value or "").strip()
    if not tool:
        return ValidationResult(default, None)
    if any(ch.isspace() for ch in tool) and not Path(tool).exists():
        return ValidationResult(None, f"{name} must be a single executable name or path")
    return ValidationResult(tool, None)


def validate_path(value: str, *, name: str = "Path") -> ValidationResult[Path]:
    try:
        path = Path(value).expanduser().resolve()
    except Exception as exc:
        return ValidationResult(None, f"Invalid {name}: {exc}")
    if path.is_dir():
        return ValidationResult(None, f"{name} is a directory: {path}")
    return ValidationResult(path, None)
