"""Tests for configuration management."""

import os
import tempfile

import pytest
import yaml
from pydantic import ValidationError

from bitbucket_migrate.config.config import (
    NO_TEAM,
    BitbucketConfig,
    Config,
    GitConfig,
    GitHubConfig,
    MigrationConfig,
)

ENVIRON = {
    'BITBUCKET_WORKSPACE': ' bb-team ',
    'BITBUCKET_USERNAME': 'bb-user',
    'BITBUCKET_PASSWORD': ' secret ',
    'GITHUB_WORKSPACE': 'acme',
    'GITHUB_USERNAME': 'octocat',
    'GITHUB_TOKEN': 'gh-token',
}


class TestGitHubConfig:
    """Test GitHub destination configuration."""

    def _config(self, **kwargs):
        return GitHubConfig(workspace='acme', username='octocat', token='t', **kwargs)

    def test_team_defaults_to_none_sentinel(self):
        """Test a missing team falls back to the sentinel."""
        assert self._config().team == NO_TEAM
        assert self._config().has_team is False

    def test_empty_team_is_none_sentinel(self):
        """Test an empty team name falls back to the sentinel."""
        assert self._config(team='').team == NO_TEAM
        assert self._config(team='   ').team == NO_TEAM

    def test_team_is_trimmed(self):
        """Test leading and trailing whitespace is removed."""
        config = self._config(team='  engineering ')
        assert config.team == 'engineering'
        assert config.has_team is True

    def test_null_team_rejected(self):
        """Test an explicit null team is a validation error."""
        with pytest.raises(ValidationError):
            self._config(team=None)

    def test_organization_flag(self):
        """Test organization ownership is derived from the identifiers."""
        assert self._config().is_organization is True
        personal = GitHubConfig(workspace='octocat', username='octocat', token='t')
        assert personal.is_organization is False

    def test_missing_token(self):
        """Test that missing token raises validation error."""
        with pytest.raises(ValidationError):
            GitHubConfig(workspace='acme', username='octocat')


class TestBitbucketConfig:
    """Test Bitbucket source configuration."""

    def test_defaults(self):
        config = BitbucketConfig(workspace='ws', username='u', password='p')

        assert config.api_url == 'https://api.bitbucket.org/2.0'
        assert config.web_url == 'https://bitbucket.org'
        assert config.timeout == 30

    def test_url_validation(self):
        """Test URL validation."""
        with pytest.raises(ValidationError):
            BitbucketConfig(workspace='ws', username='u', password='p', api_url='ftp://x')

    def test_blank_workspace_rejected(self):
        with pytest.raises(ValidationError):
            BitbucketConfig(workspace='  ', username='u', password='p')


class TestMigrationConfig:
    """Test migration settings."""

    def test_defaults(self):
        config = MigrationConfig()

        assert config.max_repositories == 500
        assert config.excluded_repositories == []
        assert config.delay_seconds == 1.0
        assert config.archive_after_days == 360
        assert config.sort == '-updated_on'

    def test_invalid_values(self):
        with pytest.raises(ValidationError):
            MigrationConfig(max_repositories=0)
        with pytest.raises(ValidationError):
            MigrationConfig(delay_seconds=-1)

    def test_frozen(self):
        """Test configuration cannot change during a run."""
        config = MigrationConfig()
        with pytest.raises(ValidationError):
            config.max_repositories = 1


class TestGitConfig:
    """Test git operations configuration."""

    def test_default_repositories_dir_is_absolute(self, tmp_path, monkeypatch):
        """Test the default working-copy root resolves against the cwd."""
        monkeypatch.chdir(tmp_path)

        config = GitConfig()

        assert os.path.isabs(config.repositories_dir)
        assert config.repositories_dir == str((tmp_path / 'repositories').resolve())

    def test_relative_repositories_dir_is_resolved(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        config = GitConfig(repositories_dir='work/repos')

        assert config.repositories_dir == str((tmp_path / 'work' / 'repos').resolve())


class TestConfig:
    """Test main configuration class."""

    def test_from_env(self):
        """Test configuration loading from environment variables."""
        config = Config.from_env(ENVIRON)

        assert config.source.workspace == 'bb-team'
        assert config.source.password == ' secret '
        assert config.destination.team == NO_TEAM
        assert config.destination.is_organization is True
        assert os.path.isabs(config.git.repositories_dir)

    def test_from_env_tuning(self):
        """Test optional tuning variables."""
        environ = dict(
            ENVIRON,
            GITHUB_TEAM='engineering',
            MIGRATION_MAX_REPOSITORIES='25',
            MIGRATION_EXCLUDED_REPOSITORIES='legacy, ,sandbox',
            MIGRATION_DELAY_SECONDS='2.5',
            LOG_LEVEL='debug',
        )
        config = Config.from_env(environ)

        assert config.destination.team == 'engineering'
        assert config.migration.max_repositories == 25
        assert config.migration.excluded_repositories == ['legacy', 'sandbox']
        assert config.migration.delay_seconds == 2.5
        assert config.logging.level == 'DEBUG'

    def test_from_env_missing_required(self):
        """Test missing credentials are fatal."""
        environ = dict(ENVIRON)
        del environ['GITHUB_TOKEN']

        with pytest.raises(ValidationError):
            Config.from_env(environ)

    def test_commit_author_defaults(self):
        config = Config.from_env(ENVIRON)

        assert config.commit_author == {
            'name': 'octocat',
            'email': 'octocat@example.com',
        }

    def test_config_file_operations(self):
        """Test saving and loading configuration files."""
        config = Config.from_env(ENVIRON)

        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = os.path.join(temp_dir, 'test_config.yaml')

            config.to_file(config_path)
            assert os.path.exists(config_path)

            loaded = Config.from_file(config_path)
            assert loaded == config

    def test_from_file_not_found(self):
        """Test loading from non-existent file."""
        with pytest.raises(FileNotFoundError):
            Config.from_file('/nonexistent/config.yaml')

    def test_extra_fields_forbidden(self):
        """Test that extra fields are not allowed."""
        with pytest.raises(ValidationError):
            Config(
                source={'workspace': 'w', 'username': 'u', 'password': 'p'},
                destination={'workspace': 'a', 'username': 'o', 'token': 't'},
                extra_field='not allowed',
            )

    def test_create_template(self):
        """Test the template is a loadable configuration."""
        with tempfile.TemporaryDirectory() as temp_dir:
            path = os.path.join(temp_dir, 'nested', 'config.yaml')
            Config.create_template(path)

            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)

            assert set(data) == {'source', 'destination', 'migration', 'git', 'logging'}
            config = Config.from_file(path)
            assert config.destination.team == NO_TEAM
