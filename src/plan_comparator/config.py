"""Configuration for plan audits."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_LEFT_LABEL = "OneKonnect"
DEFAULT_RIGHT_LABEL = "Puzzle"
DEFAULT_OUTPUT_DIR = "reports"

ENV_LEFT_LABEL = "PLAN_AUDIT_LEFT_LABEL"
ENV_RIGHT_LABEL = "PLAN_AUDIT_RIGHT_LABEL"
ENV_OUTPUT_DIR = "PLAN_AUDIT_OUTPUT_DIR"
ENV_PROJECT_NAME = "PLAN_AUDIT_PROJECT_NAME"


class ConfigurationError(RuntimeError):
    """Raised when configuration values are invalid."""


def _optional_env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


@dataclass(frozen=True)
class AuditConfig:
    """Labels and output settings for one audit run."""

    left_label: str = DEFAULT_LEFT_LABEL
    right_label: str = DEFAULT_RIGHT_LABEL
    output_dir: Path = Path(DEFAULT_OUTPUT_DIR)
    project_name: str | None = None

    def __post_init__(self) -> None:
        for field_name in ("left_label", "right_label"):
            if not getattr(self, field_name).strip():
                raise ConfigurationError(f"{field_name} must not be blank")

    @classmethod
    def from_environment(cls) -> AuditConfig:
        return cls(
            left_label=_optional_env(ENV_LEFT_LABEL) or DEFAULT_LEFT_LABEL,
            right_label=_optional_env(ENV_RIGHT_LABEL) or DEFAULT_RIGHT_LABEL,
            output_dir=Path(_optional_env(ENV_OUTPUT_DIR) or DEFAULT_OUTPUT_DIR),
            project_name=_optional_env(ENV_PROJECT_NAME),
        )


__all__ = ["AuditConfig", "ConfigurationError"]
