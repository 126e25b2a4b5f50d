"""Configuration management for Bitbucket Migration Tool."""

from typing import Optional, Dict, Any, List
from pathlib import Path
import os

from pydantic import BaseModel, ConfigDict, Field, field_validator
import yaml
from dotenv import load_dotenv


NO_TEAM = 'NONE'


class BitbucketConfig(BaseModel):
    """Configuration for the source Bitbucket workspace."""

    model_config = ConfigDict(frozen=True, extra='forbid')

    workspace: str = Field(..., description='Bitbucket workspace identifier')
    username: str = Field(..., description='Bitbucket account username')
    password: str = Field(..., description='Bitbucket app password')
    api_url: str = Field(
        default='https://api.bitbucket.org/2.0', description='Bitbucket API base URL'
    )
    web_url: str = Field(
        default='https://bitbucket.org', description='Bitbucket web/clone base URL'
    )
    timeout: int = Field(default=30, description='Request timeout in seconds')

    @field_validator('workspace', 'username')
    @classmethod
    def strip_identifier(cls, v):
        """Trim identifiers and reject blank values."""
        v = v.strip()
        if not v:
            raise ValueError('Value must not be empty')
        return v

    @field_validator('api_url', 'web_url')
    @classmethod
    def validate_url(cls, v):
        """Validate URL format."""
        if not v.startswith(('http://', 'https://')):
            raise ValueError('URL must start with http:// or https://')
        return v.rstrip('/')

    @field_validator('timeout')
    @classmethod
    def validate_timeout(cls, v):
        """Validate timeout is positive."""
        if v <= 0:
            raise ValueError('Timeout must be positive')
        return v


class GitHubConfig(BaseModel):
    """Configuration for the destination GitHub account or organization."""

    model_config = ConfigDict(frozen=True, extra='forbid')

    workspace: str = Field(..., description='GitHub organization or user login')
    username: str = Field(..., description='GitHub username owning the token')
    token: str = Field(..., description='GitHub personal access token')
    team: str = Field(
        default=NO_TEAM, description='Team slug granted write access (NONE to skip)'
    )
    api_url: str = Field(
        default='https://api.github.com', description='GitHub API base URL'
    )
    timeout: int = Field(default=30, description='Request timeout in seconds')

    @field_validator('workspace', 'username')
    @classmethod
    def strip_identifier(cls, v):
        """Trim identifiers and reject blank values."""
        v = v.strip()
        if not v:
            raise ValueError('Value must not be empty')
        return v

    @field_validator('team')
    @classmethod
    def validate_team(cls, v):
        """Trim the team name, an empty value means no team."""
        v = v.strip()
        return v or NO_TEAM

    @field_validator('api_url')
    @classmethod
    def validate_url(cls, v):
        """Validate URL format."""
        if not v.startswith(('http://', 'https://')):
            raise ValueError('URL must start with http:// or https://')
        return v.rstrip('/')

    @field_validator('timeout')
    @classmethod
    def validate_timeout(cls, v):
        """Validate timeout is positive."""
        if v <= 0:
            raise ValueError('Timeout must be positive')
        return v

    @property
    def is_organization(self) -> bool:
        """Whether repositories are created under an organization."""
        return self.workspace != self.username

    @property
    def has_team(self) -> bool:
        """Whether a team should be granted access to new repositories."""
        return bool(self.team) and self.team != NO_TEAM


class MigrationConfig(BaseModel):
    """Migration-specific configuration."""

    model_config = ConfigDict(frozen=True, extra='forbid')

    max_repositories: int = Field(
        default=500, description='Maximum number of repositories per run'
    )
    excluded_repositories: List[str] = Field(
        default_factory=list, description='Repository slugs that are never migrated'
    )
    delay_seconds: float = Field(
        default=1.0, description='Pause before each repository (rate limiting)'
    )
    archive_after_days: int = Field(
        default=360, description='Archive repositories not updated for this many days'
    )
    sort: str = Field(
        default='-updated_on', description='Sort key of the repository listing'
    )
    dry_run: bool = Field(default=False, description='Perform dry run without changes')

    @field_validator('max_repositories', 'archive_after_days')
    @classmethod
    def validate_positive(cls, v):
        """Validate value is positive."""
        if v <= 0:
            raise ValueError('Value must be positive')
        return v

    @field_validator('delay_seconds')
    @classmethod
    def validate_delay(cls, v):
        """Validate delay is not negative."""
        if v < 0:
            raise ValueError('Delay must not be negative')
        return v

    @field_validator('excluded_repositories')
    @classmethod
    def validate_excluded(cls, v):
        """Drop blank entries from the exclusion list."""
        return [slug.strip() for slug in v if slug.strip()]


class GitConfig(BaseModel):
    """Git operations configuration."""

    model_config = ConfigDict(frozen=True, extra='forbid')

    repositories_dir: str = Field(
        default='repositories',
        validate_default=True,
        description='Directory holding the transient working copies',
    )
    user_name: Optional[str] = Field(
        default=None, description='Git user name for the placeholder commit'
    )
    user_email: Optional[str] = Field(
        default=None, description='Git user email for the placeholder commit'
    )
    timeout: int = Field(
        default=3600, description='Git operation timeout in seconds (default: 1 hour)'
    )

    @field_validator('repositories_dir')
    @classmethod
    def resolve_repositories_dir(cls, v):
        """Resolve the working-copy root to an absolute path."""
        return str(Path(v).expanduser().resolve())

    @field_validator('timeout')
    @classmethod
    def validate_timeout(cls, v):
        """Validate timeout is positive."""
        if v <= 0:
            raise ValueError('Git timeout must be positive')
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(frozen=True, extra='forbid')

    level: str = Field(default='INFO', description='Log level')
    file: Optional[str] = Field(default=None, description='Log file path')
    format: Optional[str] = Field(default=None, description='Log format')

    @field_validator('level')
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ['TRACE', 'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'Log level must be one of: {valid_levels}')
        return v.upper()


class Config(BaseModel):
    """Main configuration class for Bitbucket Migration Tool."""

    model_config = ConfigDict(frozen=True, extra='forbid')

    source: BitbucketConfig = Field(..., description='Source Bitbucket workspace')
    destination: GitHubConfig = Field(..., description='Destination GitHub account')
    migration: MigrationConfig = Field(
        default_factory=MigrationConfig, description='Migration settings'
    )
    git: GitConfig = Field(
        default_factory=GitConfig, description='Git operations settings'
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description='Logging settings'
    )

    @property
    def commit_author(self) -> Dict[str, str]:
        """Identity used for commits created during the migration."""
        name = self.git.user_name or self.destination.username
        email = self.git.user_email or f'{self.destination.username}@example.com'
        return {'name': name, 'email': email}

    @classmethod
    def from_file(cls, config_path: str) -> 'Config':
        """Load configuration from YAML file."""
        config_file = Path(config_path)

        if not config_file.exists():
            raise FileNotFoundError(f'Configuration file not found: {config_path}')

        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        return cls(**config_data)

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> 'Config':
        """Load configuration from environment variables."""
        if environ is None:
            # Load .env file if it exists
            load_dotenv()
            environ = dict(os.environ)

        excluded = environ.get('MIGRATION_EXCLUDED_REPOSITORIES')

        config_data = {
            'source': {
                'workspace': environ.get('BITBUCKET_WORKSPACE'),
                'username': environ.get('BITBUCKET_USERNAME'),
                'password': environ.get('BITBUCKET_PASSWORD'),
            },
            'destination': {
                'workspace': environ.get('GITHUB_WORKSPACE'),
                'username': environ.get('GITHUB_USERNAME'),
                'token': environ.get('GITHUB_TOKEN'),
                'team': environ.get('GITHUB_TEAM'),
            },
            'migration': {
                'max_repositories': environ.get('MIGRATION_MAX_REPOSITORIES'),
                'excluded_repositories': excluded.split(',') if excluded else None,
                'delay_seconds': environ.get('MIGRATION_DELAY_SECONDS'),
                'archive_after_days': environ.get('MIGRATION_ARCHIVE_AFTER_DAYS'),
            },
            'git': {
                'repositories_dir': environ.get('GIT_REPOSITORIES_DIR'),
                'user_name': environ.get('GIT_USER_NAME'),
                'user_email': environ.get('GIT_USER_EMAIL'),
                'timeout': environ.get('GIT_TIMEOUT'),
            },
            'logging': {
                'level': environ.get('LOG_LEVEL'),
                'file': environ.get('LOG_FILE'),
            },
        }

        # Remove None values
        config_data = cls._remove_none_values(config_data)

        return cls(**config_data)

    @staticmethod
    def _remove_none_values(data: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively remove None values from dictionary."""
        if isinstance(data, dict):
            return {
                k: Config._remove_none_values(v)
                for k, v in data.items()
                if v is not None
            }
        return data

    def to_file(self, config_path: str) -> None:
        """Save configuration to YAML file."""
        config_file = Path(config_path)
        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, 'w', encoding='utf-8') as f:
            yaml.dump(
                self.model_dump(),
                f,
                default_flow_style=False,
                indent=2,
                sort_keys=False,
            )

    @staticmethod
    def create_template(output_path: str) -> None:
        """Create a configuration template file."""
        template_config = {
            'source': {
                'workspace': 'your-bitbucket-workspace',
                'username': 'your-bitbucket-username',
                'password': 'your-bitbucket-app-password',
            },
            'destination': {
                'workspace': 'your-github-organization',
                'username': 'your-github-username',
                'token': 'your-github-personal-access-token',
                'team': NO_TEAM,
            },
            'migration': {
                'max_repositories': 500,
                'excluded_repositories': [],
                'delay_seconds': 1.0,
                'archive_after_days': 360,
                'dry_run': False,
            },
            'git': {
                'repositories_dir': './repositories',
                'timeout': 3600,
            },
            'logging': {
                'level': 'INFO',
                'file': 'migration.log',
            },
        }

        config_file = Path(output_path)
        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, 'w', encoding='utf-8') as f:
            yaml.dump(
                template_config, f, default_flow_style=False, indent=2, sort_keys=False
            )
