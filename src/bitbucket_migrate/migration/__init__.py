"""Migration pipeline and run driver."""

from .builder import ContextBuilder
from .engine import (
    MigratedRepository,
    MigrationEngine,
    MigrationSummary,
    PlannedRepository,
)
from .flow import apply_flow_control, delay_each, skip_excluded, take
from .pipeline import StagePipeline, StepError
from .source import BitbucketRepositorySource
from .steps import (
    ArchiveRepositoryStep,
    CloneRepositoryStep,
    DeleteSourceRepositoryStep,
    EffectStep,
    GrantTeamAccessStep,
    ProtectBranchesStep,
    PublishRepositoryStep,
    RenameDefaultBranchStep,
    Step,
)

__all__ = [
    'ContextBuilder',
    'MigratedRepository',
    'MigrationEngine',
    'MigrationSummary',
    'PlannedRepository',
    'apply_flow_control',
    'delay_each',
    'skip_excluded',
    'take',
    'StagePipeline',
    'StepError',
    'BitbucketRepositorySource',
    'ArchiveRepositoryStep',
    'CloneRepositoryStep',
    'DeleteSourceRepositoryStep',
    'EffectStep',
    'GrantTeamAccessStep',
    'ProtectBranchesStep',
    'PublishRepositoryStep',
    'RenameDefaultBranchStep',
    'Step',
]
