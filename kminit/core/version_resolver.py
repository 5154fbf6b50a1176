"""Concurrent latest-version resolution for a set of repositories.

One task per repository runs on a thread pool; every task shares the same
release index (and therefore the same authenticated HTTP client).  A task
that fails is logged and recorded as a failure outcome.  It never cancels
its siblings and never raises out of ``resolve()``.

The report is assembled only after ``concurrent.futures.wait`` has returned
for every submitted task, so no pending result can be missed.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait

from pydantic import BaseModel, ConfigDict

from kminit.core.release_index import ReleaseIndex
from kminit.models.repositories import RepoKey, RepositoryRef, RepositorySet

logger = logging.getLogger(__name__)


class ResolutionOutcome(BaseModel):
    """Result of resolving one repository: a version or an error message."""

    model_config = ConfigDict(frozen=True)

    ref: RepositoryRef
    version: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.version is not None


class ResolutionReport(BaseModel):
    """Aggregated outcome of a ``VersionResolver.resolve()`` call."""

    model_config = ConfigDict(frozen=True)

    requested: RepositorySet = RepositorySet()
    outcomes: dict[RepoKey, ResolutionOutcome] = {}
    tasks_launched: int = 0

    @property
    def repositories(self) -> RepositorySet:
        """Successfully resolved refs with ``pinned_version`` set.

        Follows the request order; failed repositories are omitted.
        """
        resolved = RepositorySet()
        for ref in self.requested:
            outcome = self.outcomes.get(ref.key)
            if outcome is not None and outcome.version is not None:
                resolved = resolved.with_ref(ref.with_version(outcome.version))
        return resolved

    @property
    def failures(self) -> dict[RepoKey, str]:
        return {
            key: outcome.error or "unknown error"
            for key, outcome in self.outcomes.items()
            if not outcome.ok
        }


class VersionResolver:
    """Resolves the latest release tag of every repository concurrently.

    Parameters
    ----------
    index:
        Release index shared read-only by all worker threads.
    max_workers:
        Upper bound on concurrent queries.
    """

    def __init__(self, index: ReleaseIndex, *, max_workers: int = 8) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._index = index
        self._max_workers = max_workers

    def resolve(self, repos: RepositorySet) -> ResolutionReport:
        """Query the latest release of each repository in *repos*."""
        if len(repos) == 0:
            return ResolutionReport(requested=repos)

        workers = min(self._max_workers, len(repos))
        futures: dict[Future[ResolutionOutcome], RepositoryRef] = {}
        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="kminit-resolve"
        ) as pool:
            for ref in repos:
                futures[pool.submit(self._resolve_one, ref)] = ref
            wait(futures)

        outcomes: dict[RepoKey, ResolutionOutcome] = {}
        for future, ref in futures.items():
            outcomes[ref.key] = future.result()

        report = ResolutionReport(
            requested=repos, outcomes=outcomes, tasks_launched=len(futures)
        )
        logger.info(
            "Resolved %d of %d repositories",
            len(report.repositories), len(repos),
        )
        return report

    def _resolve_one(self, ref: RepositoryRef) -> ResolutionOutcome:
        """Worker task: exactly one release index query, never raises."""
        try:
            release = self._index.latest_release(ref.owner, ref.name)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Error fetching latest release for %s/%s: %s",
                ref.owner, ref.name, exc,
            )
            return ResolutionOutcome(ref=ref, error=str(exc) or type(exc).__name__)
        logger.debug("%s resolved to %s", ref.slug, release.tag_name)
        return ResolutionOutcome(ref=ref, version=release.tag_name)
