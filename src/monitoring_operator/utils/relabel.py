"""
Relabeling rules for scrape targets.

Label mappings declared on monitoring resources are compiled into Prometheus
relabel configurations. A mapping is only admitted if its compiled rule passes
the same checks Prometheus applies when loading a scrape configuration.
"""

import logging
import re
from typing import Literal

from pydantic import BaseModel, Field

from monitoring_operator.constants import TARGET_SCHEMA_LABELS
from monitoring_operator.errors import LabelMappingError
from monitoring_operator.models.monitoring import LabelMapping

logger = logging.getLogger(__name__)

LABEL_NAME_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")
INVALID_LABEL_CHAR_RE = re.compile(r"[^a-zA-Z0-9_]")


class RelabelConfig(BaseModel):
    """A Prometheus ``replace`` relabel configuration."""

    model_config = {"populate_by_name": True}

    source_labels: list[str] = Field(default_factory=list, alias="sourceLabels")
    separator: str = ";"
    regex: str = "(.*)"
    target_label: str = Field("", alias="targetLabel")
    replacement: str = "$1"
    action: Literal["replace"] = "replace"

    def validate_config(self) -> None:
        """
        Check the configuration the way Prometheus does on load.

        Target labels must be plain label names; capture group references
        would let label values pick the target at scrape time.

        Raises:
            ValueError: If the configuration would be rejected
        """
        for name in self.source_labels:
            if not LABEL_NAME_RE.match(name):
                raise ValueError(f'"{name}" is not a valid label name')
        try:
            re.compile(self.regex)
        except re.error as e:
            raise ValueError(f'invalid regex "{self.regex}": {e}') from e

        if not self.target_label:
            raise ValueError(
                f"relabel configuration for {self.action} action requires 'target_label' value"
            )
        if not LABEL_NAME_RE.match(self.target_label):
            raise ValueError(
                f"\"{self.target_label}\" is invalid 'target_label' for {self.action} action"
            )


def sanitize_label_name(name: str) -> str:
    """Replace characters not allowed in Prometheus label names with underscores."""
    return INVALID_LABEL_CHAR_RE.sub("_", name)


def is_target_schema_label(name: str) -> bool:
    """Check whether a label name identifies targets in the collection schema."""
    return name in TARGET_SCHEMA_LABELS


def label_mapping_relabel_configs(
    mappings: list[LabelMapping], prefix: str, field: str = "targetLabels"
) -> list[RelabelConfig]:
    """
    Compile label mappings into relabel configurations.

    Mappings are checked in declaration order and the first invalid one
    aborts compilation.

    Args:
        mappings: Label mappings declared on the resource
        prefix: Service discovery label prefix the mappings draw from
        field: Field path of the mappings, used in error messages

    Returns:
        One ``replace`` relabel configuration per mapping

    Raises:
        LabelMappingError: If a mapping cannot be compiled
    """
    configs: list[RelabelConfig] = []
    for i, mapping in enumerate(mappings):
        rule_field = f"{field}[{i}]"
        if not mapping.from_:
            raise LabelMappingError("label mapping requires a 'from' label", field=rule_field)

        # `to` can be unset, default to `from`.
        target = mapping.to or mapping.from_
        if is_target_schema_label(target):
            raise LabelMappingError(
                f'relabel "{mapping.from_}" to "{target}" conflicts with the target schema',
                field=rule_field,
            )
        if target.startswith("__"):
            raise LabelMappingError(
                f'relabel "{mapping.from_}" to "{target}": label names starting '
                "with '__' are reserved",
                field=rule_field,
            )
        if "$" in target:
            raise LabelMappingError(
                f'relabel "{mapping.from_}" to "{target}": target must be a label '
                "name, capture group references are not allowed",
                field=rule_field,
            )

        config = RelabelConfig(
            action="replace",
            source_labels=[prefix + sanitize_label_name(mapping.from_)],
            target_label=target,
        )
        try:
            config.validate_config()
        except ValueError as e:
            raise LabelMappingError(
                f'relabel "{mapping.from_}" to "{target}"', field=rule_field, cause=e
            ) from e
        configs.append(config)

    logger.debug(f"Compiled {len(configs)} label mappings for prefix {prefix}")
    return configs
