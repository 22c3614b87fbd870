"""Base models for Claude Code Worktrees."""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class SerializableModel(BaseModel):
    """Base model serialized with camelCase keys.

    Both the camelCase alias and the Python field name are accepted on
    input; output always uses the alias.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_json(self, **kwargs) -> str:
        """Convert to JSON string."""
        kwargs.setdefault("by_alias", True)
        return self.model_dump_json(**kwargs)

    @classmethod
    def from_json(cls, json_str: str) -> "SerializableModel":
        """Create from JSON string."""
        return cls.model_validate_json(json_str)

    def to_dict(self, **kwargs) -> dict[str, Any]:
        """Convert to dictionary."""
        kwargs.setdefault("by_alias", True)
        return self.model_dump(**kwargs)
