"""Check registry: where check runs for a commit reference are listed.

``GitHubCheckRegistry`` wraps PyGithub. PyGithub is synchronous, so the
async method runs the sync call via ``asyncio.to_thread()``.
"""

import asyncio
import logging
from typing import Dict, Optional, Protocol, Tuple, Union

import requests
from github import Auth, Github, GithubException
from github.Consts import DEFAULT_BASE_URL
from github.GithubRetry import GithubRetry

from check_gate.errors import RegistryError
from check_gate.models import CheckFilter, CheckRun, CheckRunPage, CheckStatus

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


class CheckRegistry(Protocol):
    """Read-only, paginated listing of check runs keyed by commit reference."""

    async def list_checks_async(
        self,
        repository: str,
        ref: str,
        *,
        page: int,
        page_size: int,
        filter: Union[CheckFilter, str] = CheckFilter.LATEST,
        status: Optional[Union[CheckStatus, str]] = None,
    ) -> CheckRunPage:
        ...


class GitHubCheckRegistry:
    """Check runs from the GitHub Checks API.

    Pages are 1-based, matching the REST API. Any PyGithub or transport
    failure is raised as ``RegistryError``; nothing is retried here unless
    ``retries`` is set, in which case PyGithub's own retry policy is used.
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: int = 15,
        retries: int = 0,
    ):
        if not token:
            raise ValueError("a GitHub token is required")
        self._auth = Auth.Token(token)
        self.base_url = base_url
        self.timeout = timeout
        self.retries = retries
        # PyGithub fixes the page size per client
        self._clients: Dict[int, Github] = {}
        self._commits: Dict[Tuple[str, str, int], object] = {}

    def _client_for(self, page_size: int) -> Github:
        if not 1 <= page_size <= MAX_PAGE_SIZE:
            raise ValueError(f"page_size must be between 1 and {MAX_PAGE_SIZE}")
        client = self._clients.get(page_size)
        if client is None:
            client = Github(
                auth=self._auth,
                base_url=self.base_url,
                timeout=self.timeout,
                per_page=page_size,
                retry=GithubRetry(total=self.retries) if self.retries else None,
            )
            self._clients[page_size] = client
        return client

    def _get_commit(self, repository: str, ref: str, page_size: int):
        key = (repository, ref, page_size)
        commit = self._commits.get(key)
        if commit is None:
            repo = self._client_for(page_size).get_repo(repository, lazy=True)
            commit = repo.get_commit(ref)
            self._commits[key] = commit
        return commit

    def list_checks(
        self,
        repository: str,
        ref: str,
        *,
        page: int,
        page_size: int,
        filter: Union[CheckFilter, str] = CheckFilter.LATEST,
        status: Optional[Union[CheckStatus, str]] = None,
    ) -> CheckRunPage:
        """List one page of check runs for ``ref``."""
        if page < 1:
            raise ValueError("page numbers start at 1")

        kwargs = {"filter": CheckFilter(filter).value}
        if status is not None:
            kwargs["status"] = CheckStatus(status).value

        try:
            commit = self._get_commit(repository, ref, page_size)
            runs = commit.get_check_runs(**kwargs)
            entries = [CheckRun.from_github(run) for run in runs.get_page(page - 1)]
            total_count = runs.totalCount
        except GithubException as e:
            raise RegistryError(
                f"GitHub API error listing check runs for {repository}@{ref}: "
                f"{_github_message(e)}",
                status=e.status,
            ) from e
        except requests.RequestException as e:
            raise RegistryError(
                f"could not reach GitHub listing check runs for {repository}@{ref}: {e}"
            ) from e

        logger.debug(
            "Listed %d check runs on page %d for %s@%s (total %d)",
            len(entries),
            page,
            repository,
            ref,
            total_count,
        )
        return CheckRunPage(entries=entries, total_count=total_count)

    def count_checks(
        self,
        repository: str,
        ref: str,
        status: Optional[Union[CheckStatus, str]] = None,
        filter: Union[CheckFilter, str] = CheckFilter.LATEST,
    ) -> int:
        """Number of check runs for ``ref``, optionally only those in ``status``."""
        page = self.list_checks(
            repository, ref, page=1, page_size=1, filter=filter, status=status
        )
        return page.total_count

    # -------------------------------------------------------------------------
    # Async Methods (using asyncio.to_thread for compatibility)
    # -------------------------------------------------------------------------

    async def list_checks_async(
        self,
        repository: str,
        ref: str,
        *,
        page: int,
        page_size: int,
        filter: Union[CheckFilter, str] = CheckFilter.LATEST,
        status: Optional[Union[CheckStatus, str]] = None,
    ) -> CheckRunPage:
        """List one page of check runs (async)."""
        return await asyncio.to_thread(
            lambda: self.list_checks(
                repository,
                ref,
                page=page,
                page_size=page_size,
                filter=filter,
                status=status,
            )
        )

    def close(self) -> None:
        for client in self._clients.values():
            client.close()
        self._clients.clear()
        self._commits.clear()


def _github_message(error: GithubException) -> str:
    data = error.data
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return str(error)
