"""Scene graph — scenes, their authors and branches, and the parsed document."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterator, Mapping, Optional, Union

from scenario_script.actions import Action, Return

Step = Union[Action, Return]


@dataclass(frozen=True)
class Author:
    id: str


class Block:
    """Ordered, append-only sequence of branch steps."""

    def __init__(self) -> None:
        self._steps: list[Step] = []

    def append(self, step: Step) -> None:
        self._steps.append(step)

    def __getitem__(self, index: int) -> Step:
        return self._steps[index]

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[Step]:
        return iter(self._steps)

    def __repr__(self) -> str:
        return f"Block({self._steps!r})"


@dataclass
class Branch:
    id: str
    block: Block = field(default_factory=Block)


class Scene:
    """A named unit of the script holding authors and branches.

    Authors are unique by id: adding an author whose id is already present is
    a no-op.  Branches are keyed by id: adding a branch whose id is already
    present replaces the earlier one.
    """

    def __init__(self, id: str) -> None:
        self._id = id
        self._authors: dict[str, Author] = {}
        self._branches: dict[str, Branch] = {}

    @property
    def id(self) -> str:
        return self._id

    @property
    def authors(self) -> tuple[Author, ...]:
        return tuple(self._authors.values())

    @property
    def branches(self) -> Mapping[str, Branch]:
        return MappingProxyType(self._branches)

    def add_author(self, author: Author) -> None:
        if author.id in self._authors:
            return
        self._authors[author.id] = author

    def has_author(self, author_id: str) -> bool:
        return author_id in self._authors

    def add_branch(self, branch: Branch) -> None:
        self._branches[branch.id] = branch

    def get_branch(self, branch_id: str) -> Optional[Branch]:
        return self._branches.get(branch_id)

    def __repr__(self) -> str:
        return (
            f"Scene(id={self._id!r}, authors={list(self._authors)!r}, "
            f"branches={list(self._branches)!r})"
        )


@dataclass
class Document:
    """Parse result: scenes in source order plus the top-level authors."""

    scenes: list[Scene] = field(default_factory=list)
    authors: list[Author] = field(default_factory=list)

    def broadcast_authors(self) -> None:
        """Attach every top-level author to every scene."""
        for author in self.authors:
            for scene in self.scenes:
                scene.add_author(author)

    def get_scene(self, scene_id: str) -> Optional[Scene]:
        for scene in self.scenes:
            if scene.id == scene_id:
                return scene
        return None

    def __iter__(self) -> Iterator[Scene]:
        return iter(self.scenes)

    def __len__(self) -> int:
        return len(self.scenes)
