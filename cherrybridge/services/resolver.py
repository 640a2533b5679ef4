"""Turn partial promotion settings into a complete, validated PromotionConfig.

NonInteractiveResolver fills gaps from configured defaults and fails on a
missing label; InteractiveResolver prompts for whatever is still missing.
"""

import logging
from abc import ABC, abstractmethod
from typing import List

import click

from cherrybridge.config import PromotionDefaultsConfig
from cherrybridge.errors import InvalidConfigurationError
from cherrybridge.models import PartialConfig, PromotionConfig
from cherrybridge.services.git.branches import promotion_branch_name

LOG = logging.getLogger("cherrybridge.services.resolver")


def validate_config(config: PromotionConfig) -> PromotionConfig:
    """Reject configs that would pick onto the source or target branch itself."""
    if not config.label.strip():
        raise InvalidConfigurationError("Label is required.")
    if not config.from_branch or not config.to_branch:
        raise InvalidConfigurationError("Both source (--from) and target (--to) branches are required.")
    if config.promotion_branch in (config.from_branch, config.to_branch):
        raise InvalidConfigurationError(
            f"Promotion branch {config.promotion_branch!r} must differ from "
            f"source {config.from_branch!r} and target {config.to_branch!r}."
        )
    return config


class ConfigResolver(ABC):
    """Completes a PartialConfig; flags and stored values are already merged in."""

    def __init__(self, defaults: PromotionDefaultsConfig | None = None) -> None:
        self._defaults = defaults or PromotionDefaultsConfig()

    @abstractmethod
    def resolve(self, partial: PartialConfig) -> PromotionConfig:
        """Return a validated PromotionConfig or raise InvalidConfigurationError."""
        ...

    @abstractmethod
    def select_label(self, labels: List[str]) -> str:
        """Choose one of several stored session labels."""
        ...

    def _build(self, label: str, from_branch: str, to_branch: str, promotion_branch: str | None) -> PromotionConfig:
        return validate_config(
            PromotionConfig(
                label=label.strip(),
                from_branch=from_branch,
                to_branch=to_branch,
                promotion_branch=promotion_branch or promotion_branch_name(label.strip(), self._defaults.branch_prefix),
            )
        )


class NonInteractiveResolver(ConfigResolver):
    """Flags, stored values and config defaults only; never prompts."""

    def resolve(self, partial: PartialConfig) -> PromotionConfig:
        if not partial.label or not partial.label.strip():
            raise InvalidConfigurationError("Label is required (pass --label).")
        return self._build(
            partial.label,
            partial.from_branch or self._defaults.from_branch,
            partial.to_branch or self._defaults.to_branch,
            partial.promotion_branch,
        )

    def select_label(self, labels: List[str]) -> str:
        if len(labels) == 1:
            return labels[0]
        raise InvalidConfigurationError(f"Multiple sessions found ({', '.join(labels)}); pass --label.")


def _require_text(value: str) -> str:
    if not str(value or "").strip():
        raise click.BadParameter("Label is required")
    return value.strip()


class InteractiveResolver(ConfigResolver):
    """Prompts on the terminal for fields that are still missing."""

    def resolve(self, partial: PartialConfig) -> PromotionConfig:
        from_branch = partial.from_branch or click.prompt(
            "Obtain PRs merged into which base branch?",
            default=self._defaults.from_branch,
        )
        to_branch = partial.to_branch or click.prompt(
            "Cherry-pick into which target base branch?",
            default=self._defaults.to_branch,
        )
        label = partial.label or click.prompt(
            "Which PR label should be used to select PRs?",
            value_proc=_require_text,
        )
        return self._build(label, from_branch, to_branch, partial.promotion_branch)

    def select_label(self, labels: List[str]) -> str:
        if len(labels) == 1:
            return labels[0]
        return click.prompt(
            "Multiple cherrybridge sessions found. Which one?",
            type=click.Choice(labels),
        )
