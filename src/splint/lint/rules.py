"""
Rule definitions.

Schema for the human-authored rules file. These models only check shape
and types; what a kind name or a /regex/ value means is decided by the
pattern compiler so those problems surface as rule errors.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class Needle(BaseModel):
    """
    One position of a rule pattern, as written in the rules file.

    Accepted forms:
        ["Punct", "."]          exact value
        ["Ident", "/^test_/"]   regex value
        ["Ident", null]         any value (also ["Ident"] for TOML)
        {kind = "Ident", value = "unwrap"}
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: str
    value: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _from_pair(cls, data: Any) -> Any:
        if isinstance(data, (list, tuple)):
            if len(data) not in (1, 2):
                raise ValueError("needle must be a [kind, value] pair")
            return {"kind": data[0], "value": data[1] if len(data) == 2 else None}
        return data

    def __str__(self) -> str:
        return f"{self.kind}({self.value or ''!r})"


class Rule(BaseModel):
    """A named lint definition."""
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    name: str
    description: str
    help: Optional[str] = None
    more: Optional[str] = Field(default=None, validation_alias=AliasChoices("more", "link"))
    fail: bool = Field(default=False, validation_alias=AliasChoices("fail", "fails"))
    range: Tuple[int, int]
    pattern: Tuple[Needle, ...]


class RuleSet(BaseModel):
    """Rules keyed by name. Mapping order is the declaration order."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    rules: Dict[str, Rule] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _default_names(cls, data: Any) -> Any:
        # A rule's name defaults to its key in the mapping
        if isinstance(data, dict) and isinstance(data.get("rules"), dict):
            rules = {}
            for key, body in data["rules"].items():
                if isinstance(body, dict) and "name" not in body:
                    body = {"name": key, **body}
                rules[key] = body
            data = {**data, "rules": rules}
        return data

    @model_validator(mode="after")
    def _unique_names(self) -> "RuleSet":
        """Ensure effective rule names are unique."""
        seen: Dict[str, str] = {}
        for key, rule in self.rules.items():
            if rule.name in seen:
                raise ValueError(
                    f"Duplicate rule name '{rule.name}' (keys '{seen[rule.name]}' and '{key}')"
                )
            seen[rule.name] = key
        return self

    def __len__(self) -> int:
        return len(self.rules)
