"""
Data models for the contributions generator.

This module contains the shared data structures used across all modules.
"""

import enum
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class RepositoryOwner:
    """Owner of a repository as reported by the GraphQL API."""
    login: str
    avatar_url: Optional[str]


@dataclass(frozen=True)
class RepositoryContribution:
    """A repository the target user has contributed to."""
    name: str
    url: str
    description: Optional[str]
    owner: RepositoryOwner

    @property
    def identity(self) -> Tuple[str, str]:
        return (self.owner.login, self.name)

    @property
    def full_name(self) -> str:
        return f"{self.owner.login}/{self.name}"

    @classmethod
    def from_node(cls, node: Dict[str, Any]) -> "RepositoryContribution":
        """
        Build a contribution from a ``repositoriesContributedTo`` node.

        Args:
            node: One entry of ``data.user.repositoriesContributedTo.nodes``

        Returns:
            RepositoryContribution built from the node
        """
        owner = node.get("owner") or {}
        return cls(
            name=node["name"],
            url=node["url"],
            description=node.get("description") or None,
            owner=RepositoryOwner(
                login=owner.get("login", ""),
                avatar_url=owner.get("avatarUrl") or None,
            ),
        )


class RenderMode(enum.Enum):
    """Available renderer strategies."""
    INLINE = "inline"
    SPRITE = "sprite"
    PER_REPOSITORY = "per-repo"

    @classmethod
    def parse(cls, value: str) -> "RenderMode":
        """Parse a mode name, accepting the long-form aliases as well."""
        key = value.strip().lower()
        for mode in cls:
            if key == mode.value:
                return mode
        if key in _MODE_ALIASES:
            return _MODE_ALIASES[key]
        raise ValueError(f"Unknown render mode: {value!r}")


_MODE_ALIASES = {
    "inlineanchors": RenderMode.INLINE,
    "combinedsprite": RenderMode.SPRITE,
    "perrepositoryfiles": RenderMode.PER_REPOSITORY,
    "per_repo": RenderMode.PER_REPOSITORY,
}


@dataclass(frozen=True)
class RenderedArtifact:
    """A file produced by a renderer (sprite sheet or per-repository SVG)."""
    path: str
    content: str
