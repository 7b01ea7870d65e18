"""Builds the collaborators of a release run and runs it."""

import structlog

from donder_release.configuration.models import ReleaseConfig
from donder_release.git.work_tree import GitWorkTree
from donder_release.github.adapter import GitHubKitAdapter

from .orchestrator import ReleaseOrchestrator
from .publisher import ReleasePublisher
from .results import RunResult

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


async def run_release_workflow(config: ReleaseConfig) -> RunResult:
    """Run the release workflow for a reconciled configuration.

    Dry runs without a token or without a known repository never talk to the
    release host; tags are then read from the local repository only.
    """
    work_tree = GitWorkTree(config.repository_path)
    publisher: ReleasePublisher | None = None
    if config.github_token and config.repo:
        adapter = await GitHubKitAdapter.create(
            repo=config.repo,
            github_token=config.github_token,
            github_api_url=config.github_api_url,
            request_timeout=config.request_timeout,
        )
        publisher = ReleasePublisher(adapter, overwrite=config.overwrite)
    else:
        logger.info("Release host not configured, using local tags only")

    orchestrator = ReleaseOrchestrator(work_tree, publisher, config)
    return await orchestrator.run()
