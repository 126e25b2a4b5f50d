"""The ordered steps that migrate one repository."""

from abc import ABC, abstractmethod
from typing import List, Optional
from urllib.parse import quote, urlsplit, urlunsplit

from pydantic import TypeAdapter, ValidationError

from ..api.exceptions import SchemaValidationError
from ..config.config import Config
from ..git.transport import RepositoryTransport
from ..models.context import MigrationContext, PublishedMigrationContext
from ..models.github import GitHubBranch, GitHubRepository
from ..utils.text import strip_control_characters, with_git_suffix

_branches_adapter = TypeAdapter(List[GitHubBranch])

MAIN_BRANCH = 'main'
LEGACY_BRANCH = 'master'


def _segments(*parts: str) -> str:
    return '/'.join(quote(part, safe='') for part in parts)


def authenticated_url(url: str, username: str, password: str, suffix: str = '') -> str:
    """Embed credentials in a repository URL and point it at the git endpoint."""
    parts = urlsplit(url)
    netloc = parts.netloc.rsplit('@', 1)[-1]
    userinfo = f'{quote(username, safe="")}:{quote(password, safe="")}'
    path = with_git_suffix(parts.path.rstrip('/'), suffix)
    return urlunsplit((parts.scheme, f'{userinfo}@{netloc}', path, '', ''))


class Step(ABC):
    """One stage of the per-repository pipeline."""

    name = 'step'

    def __init__(self, config: Config, transport: RepositoryTransport):
        self.config = config
        self.transport = transport

    @abstractmethod
    async def apply(self, context: MigrationContext) -> MigrationContext:
        """Run the step and return the context for the next one."""


class EffectStep(Step):
    """A step that only performs side effects and may be skipped."""

    def skip_reason(self, context: MigrationContext) -> Optional[str]:
        """Why the step does not apply to this repository, if it does not."""
        return None

    @abstractmethod
    async def execute(self, context: MigrationContext) -> None:
        """Perform the side effect."""

    async def apply(self, context: MigrationContext) -> MigrationContext:
        """Execute the step unless it is skipped.

        Args:
            context: Current repository context

        Returns:
            The same context, unchanged
        """
        reason = self.skip_reason(context)
        if reason:
            context.logger.trace(f'Skipping {self.name} step: {reason}')
            return context

        await self.execute(context)
        return context


class CloneRepositoryStep(EffectStep):
    """Fetch every branch from Bitbucket into a fresh working copy."""

    name = 'clone'

    def clone_url(self, context: MigrationContext) -> str:
        """Authenticated Bitbucket clone URL of the repository."""
        source = self.config.source
        return authenticated_url(
            f'{source.web_url}/{_segments(source.workspace, context.slug)}',
            source.username,
            source.password,
            context.slug_suffix,
        )

    async def execute(self, context: MigrationContext) -> None:
        """Replace any stale working copy with a fresh clone.

        Args:
            context: Current repository context

        Raises:
            GitCommandError: If cloning or checking out fails
        """
        log = context.logger

        log.debug(f'Processing repository updated {context.updated_days_ago} days ago')
        log.trace(f'Removing existing repository folder {context.working_dir}')
        await self.transport.remove_path(context.working_dir)

        log.debug('Cloning repository')
        await self.transport.clone_bare(self.clone_url(context), context.working_dir)

        log.debug('Converting bare repository to normal repository')
        await self.transport.convert_to_working_copy(context.working_dir)


class RenameDefaultBranchStep(EffectStep):
    """Rename ``master`` to ``main``, leaving a placeholder ``master`` behind."""

    name = 'rename-default-branch'

    async def execute(self, context: MigrationContext) -> None:
        """Rename the default branch based on the branches of the local clone.

        Nothing happens when ``main`` already exists or ``master`` does not.
        """
        log = context.logger
        cwd = context.working_dir

        if await self.transport.branch_exists(cwd, MAIN_BRANCH):
            log.trace('Skipping renaming `master` branch: `main` branch already exists')
            return

        if not await self.transport.branch_exists(cwd, LEGACY_BRANCH):
            log.trace('Skipping renaming `master` branch: branch does not exist')
            return

        log.debug('Renaming `master` branch to `main`')
        await self.transport.rename_branch(cwd, LEGACY_BRANCH, MAIN_BRANCH)
        await self.transport.create_placeholder_branch(
            cwd, LEGACY_BRANCH, self.config.commit_author, return_to=MAIN_BRANCH
        )
        log.debug('Branch renamed')


class PublishRepositoryStep(Step):
    """Create the GitHub repository and mirror-push the working copy to it."""

    name = 'publish'

    def create_endpoint(self, context: MigrationContext) -> str:
        """GitHub endpoint creating the repository for the destination owner."""
        if context.is_organization:
            return f'orgs/{_segments(self.config.destination.workspace)}/repos'
        return 'user/repos'

    async def apply(self, context: MigrationContext) -> PublishedMigrationContext:
        """Create the repository on GitHub and push every ref to it.

        Args:
            context: Current repository context

        Returns:
            Context extended with the GitHub repository URL

        Raises:
            APIError: If the repository cannot be created
            SchemaValidationError: If the creation response has no URL
            GitCommandError: If the mirror push fails
        """
        log = context.logger
        destination = self.config.destination

        log.debug('Creating repository on GitHub')
        response = await context.destination_client.post_async(
            self.create_endpoint(context),
            data={
                'name': context.slug,
                'private': context.is_private,
                'description': strip_control_characters(context.description),
            },
        )

        try:
            created = GitHubRepository.model_validate(response.data)
        except ValidationError as e:
            raise SchemaValidationError(
                'Unexpected repository creation response',
                status_code=response.status_code,
                response_data=response.data,
            ) from e

        log.debug('Pushing all branches to GitHub')
        push_url = authenticated_url(
            created.html_url,
            destination.username,
            destination.token,
            context.slug_suffix,
        )
        await self.transport.push_mirror(context.working_dir, push_url)
        log.debug('All branches pushed to GitHub')

        return context.published(created.html_url)


class GrantTeamAccessStep(EffectStep):
    """Give the configured team push permission (organizations only)."""

    name = 'grant-team-access'

    def skip_reason(self, context: MigrationContext) -> Optional[str]:
        if not context.is_organization:
            return 'not an organization'
        if not self.config.destination.has_team:
            return 'no team name'
        return None

    async def execute(self, context: MigrationContext) -> None:
        """Grant the configured team push permission on the repository."""
        destination = self.config.destination

        context.logger.debug(f'Granting write permissions to team {destination.team}')
        await context.destination_client.put_async(
            _segments(
                'orgs',
                destination.workspace,
                'teams',
                destination.team,
                'repos',
                destination.workspace,
                context.slug,
            ),
            data={'permission': 'push'},
        )
        context.logger.debug('Write permissions granted')


class ProtectBranchesStep(EffectStep):
    """Protect ``main`` and the ``master`` placeholder (organizations only)."""

    name = 'protect-branches'

    # Deleting the placeholder stays allowed, deleting main does not
    allow_deletions = {MAIN_BRANCH: False, LEGACY_BRANCH: True}

    def skip_reason(self, context: MigrationContext) -> Optional[str]:
        if not context.is_organization:
            return 'repository not owned by organization'
        return None

    @staticmethod
    def protection_rules(allow_deletions: bool) -> dict:
        """Protection body forbidding force pushes, enforced for admins."""
        return {
            'required_status_checks': None,
            'required_pull_request_reviews': None,
            'restrictions': None,
            'enforce_admins': True,
            'allow_force_pushes': False,
            'allow_deletions': allow_deletions,
        }

    async def list_branches(self, context: MigrationContext) -> List[GitHubBranch]:
        """List the branches of the GitHub repository.

        Args:
            context: Current repository context

        Returns:
            Branches of the first listing page (up to 100)

        Raises:
            SchemaValidationError: If the listing is not a list of branches
        """
        response = await context.destination_client.get_async(
            _segments('repos', self.config.destination.workspace, context.slug)
            + '/branches',
            params={'per_page': 100},
        )

        try:
            return _branches_adapter.validate_python(response.data)
        except ValidationError as e:
            raise SchemaValidationError(
                'Unexpected branch listing response',
                status_code=response.status_code,
                response_data=response.data,
            ) from e

    async def execute(self, context: MigrationContext) -> None:
        """Apply protection rules to whichever of ``main`` and ``master`` exist."""
        existing = {branch.name for branch in await self.list_branches(context)}

        for branch, allow_deletions in self.allow_deletions.items():
            if branch not in existing:
                context.logger.trace(
                    f'Skipping protection for `{branch}` branch: branch does not exist'
                )
                continue

            context.logger.debug(f'Configuring protection rules for `{branch}` branch')
            await context.destination_client.put_async(
                _segments(
                    'repos',
                    self.config.destination.workspace,
                    context.slug,
                    'branches',
                    branch,
                    'protection',
                ),
                data=self.protection_rules(allow_deletions),
            )

        context.logger.debug('Branch protection configured')


class ArchiveRepositoryStep(EffectStep):
    """Archive repositories that have not been updated for a long time."""

    name = 'archive'

    def skip_reason(self, context: MigrationContext) -> Optional[str]:
        if not context.should_be_archived:
            return 'the repository has been updated recently'
        return None

    async def execute(self, context: MigrationContext) -> None:
        """Mark the GitHub repository archived."""
        context.logger.debug('Archiving repository')
        await context.destination_client.patch_async(
            _segments('repos', self.config.destination.workspace, context.slug),
            data={'archived': True},
        )
        context.logger.debug('Repository archived')


class DeleteSourceRepositoryStep(EffectStep):
    """Delete the Bitbucket repository and the local working copy."""

    name = 'delete-source'

    async def execute(self, context: PublishedMigrationContext) -> None:
        """Delete the Bitbucket repository, redirecting it to GitHub.

        The working copy is removed even when the deletion fails.

        Args:
            context: Context of a published repository
        """
        try:
            context.logger.debug('Deleting repository on Bitbucket')
            await context.source_client.delete_async(
                _segments('repositories', self.config.source.workspace, context.slug),
                params={'redirect_to': context.destination_url},
            )
            context.logger.debug('Repository deleted on Bitbucket')
        finally:
            await self.transport.remove_path(context.working_dir)
            context.logger.debug('Repository files removed from disk')


DEFAULT_STEPS = (
    CloneRepositoryStep,
    RenameDefaultBranchStep,
    PublishRepositoryStep,
    GrantTeamAccessStep,
    ProtectBranchesStep,
    ArchiveRepositoryStep,
    DeleteSourceRepositoryStep,
)
