"""Repository and release models — what gets resolved and downloaded.

A ``RepositorySet`` is never mutated in place.  Every addition returns a
new set, and version resolution hands back a wholly new set, so no two
threads can ever write to the same collection.
"""

from __future__ import annotations

from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict

RepoKey = tuple[str, str]  # (owner, name)


class RepositoryRef(BaseModel):
    """A named repository, optionally pinned to a release tag.

    Identity is ``(owner, name)``; ``pinned_version`` is filled in by the
    version resolver.
    """

    model_config = ConfigDict(frozen=True)

    owner: str
    name: str
    pinned_version: str | None = None

    @property
    def key(self) -> RepoKey:
        return (self.owner, self.name)

    @property
    def slug(self) -> str:
        """``owner/name`` form used in logs and URLs."""
        return f"{self.owner}/{self.name}"

    def with_version(self, version: str) -> RepositoryRef:
        """Return a copy of this ref pinned to *version*."""
        return self.model_copy(update={"pinned_version": version})


class RepositorySet(BaseModel):
    """Insertion-ordered, immutable collection of ``RepositoryRef``.

    Examples
    --------
    >>> repos = RepositorySet().with_repository("KiraCore", "sekai")
    >>> repos = repos.with_repository("KiraCore", "interx")
    >>> [r.name for r in repos]
    ['sekai', 'interx']
    """

    model_config = ConfigDict(frozen=True)

    repositories: tuple[RepositoryRef, ...] = ()

    @classmethod
    def from_refs(cls, refs: list[RepositoryRef]) -> RepositorySet:
        result = cls()
        for ref in refs:
            result = result.with_ref(ref)
        return result

    def with_repository(
        self, owner: str, name: str, version: str | None = None
    ) -> RepositorySet:
        """Return a new set with ``owner/name`` added (or replaced)."""
        return self.with_ref(
            RepositoryRef(owner=owner, name=name, pinned_version=version)
        )

    def with_ref(self, ref: RepositoryRef) -> RepositorySet:
        """Return a new set containing *ref*.

        An existing entry with the same identity keeps its position and is
        replaced by *ref*.
        """
        refs = list(self.repositories)
        for i, existing in enumerate(refs):
            if existing.key == ref.key:
                refs[i] = ref
                break
        else:
            refs.append(ref)
        return RepositorySet(repositories=tuple(refs))

    def get(self, owner: str, name: str) -> RepositoryRef | None:
        for ref in self.repositories:
            if ref.key == (owner, name):
                return ref
        return None

    def keys(self) -> list[RepoKey]:
        return [ref.key for ref in self.repositories]

    def __iter__(self) -> Iterator[RepositoryRef]:  # type: ignore[override]
        return iter(self.repositories)

    def __len__(self) -> int:
        return len(self.repositories)

    def __contains__(self, key: object) -> bool:
        return any(ref.key == key for ref in self.repositories)


class ReleaseAsset(BaseModel):
    """A downloadable file attached to a release."""

    model_config = ConfigDict(frozen=True)

    name: str
    download_url: str


class Release(BaseModel):
    """A published release as reported by the release index."""

    model_config = ConfigDict(frozen=True)

    tag_name: str
    assets: tuple[ReleaseAsset, ...] = ()

    def find_asset(self, name: str) -> ReleaseAsset | None:
        """Return the asset whose name matches *name* exactly."""
        for asset in self.assets:
            if asset.name == name:
                return asset
        return None
