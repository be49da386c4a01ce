from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

RuleKey = str | type[Any]
"""Identifier string or class object, as accepted by the container setters."""

AliasRule = tuple[RuleKey] | tuple[RuleKey, dict[str, Any]]
"""``[target]`` or ``[target, params]``."""

InjectionRule = tuple[str] | tuple[str, dict[str, Any]]
"""``[method]`` or ``[method, params]``."""


class ContainerRules(BaseModel):
    """Declarative container configuration.

    Every section is optional. ``Container.set_rules`` applies them in the
    order preferences, aliases, params, shared, injections.

    Examples:
        .. code-block:: python

            container.set_rules(
                {
                    "aliases": {"SmallTV": ["app.tv.TV", {"inches": 12}]},
                    "params": {"app.tv.TV": {"inches": 55}},
                    "shared": {"SmallTV": True},
                    "injections": {"app.log.Logger": [["add_handler", {"handler": "stderr"}]]},
                },
            )

    """

    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    preferences: dict[RuleKey, RuleKey] = Field(default_factory=dict)
    aliases: dict[RuleKey, AliasRule] = Field(default_factory=dict)
    params: dict[RuleKey, dict[str, Any]] = Field(default_factory=dict)
    shared: dict[RuleKey, bool] = Field(default_factory=dict)
    injections: dict[RuleKey, list[InjectionRule]] = Field(default_factory=dict)
