"""Sequential per-repository stage pipeline."""

from typing import Iterable, List

from ..config.config import Config
from ..git.transport import RepositoryTransport
from ..models.context import MigrationContext, PublishedMigrationContext
from .steps import DEFAULT_STEPS, Step


class StepError(Exception):
    """A pipeline step failed for a repository."""

    def __init__(self, step: str, slug: str, error: Exception):
        super().__init__(f'Step {step} failed for repository {slug}: {error}')
        self.step = step
        self.slug = slug


class StagePipeline:
    """Runs the migration steps for one repository, strictly in order.

    A failing step stops the pipeline and the error propagates to the
    caller. Side effects of earlier steps are left in place.
    """

    def __init__(self, steps: Iterable[Step]):
        self.steps: List[Step] = list(steps)

    @classmethod
    def default(cls, config: Config, transport: RepositoryTransport) -> 'StagePipeline':
        """Pipeline made of the standard migration steps."""
        return cls(step(config, transport) for step in DEFAULT_STEPS)

    async def run(self, context: MigrationContext) -> PublishedMigrationContext:
        """Run every step for one repository.

        Args:
            context: Context built for the repository

        Returns:
            Context returned by the last step

        Raises:
            StepError: If any step fails, chained from the step's exception
        """
        for step in self.steps:
            try:
                context = await step.apply(context)
            except Exception as e:
                context.logger.error(f'Step {step.name} failed: {e}')
                raise StepError(step.name, context.slug, e) from e

        return context
