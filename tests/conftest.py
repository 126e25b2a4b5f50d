"""Shared fixtures for the test suite."""

import os
import shutil
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from bitbucket_migrate.api.client import APIResponse, BitbucketClient, GitHubClient
from bitbucket_migrate.config.config import Config
from bitbucket_migrate.git.exceptions import GitCommandError
from bitbucket_migrate.git.transport import RepositoryTransport
from bitbucket_migrate.migration.builder import ContextBuilder
from bitbucket_migrate.models.repository import RepositorySummary

NOW = datetime(2021, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeTransport(RepositoryTransport):
    """In-memory repository transport recording every call."""

    def __init__(self, branches=('master',)):
        self.initial_branches = set(branches)
        self.branches = {}
        self.placeholders = {}
        self.pushed = {}
        self.calls = []
        self.fail_on = None

    def _record(self, name, *args):
        self.calls.append((name, *args))
        if self.fail_on == name:
            raise GitCommandError(['git', name], 1, 'simulated failure')

    def _branches(self, path):
        return self.branches.setdefault(path, set(self.initial_branches))

    async def remove_path(self, path):
        self._record('remove_path', path)
        self.branches.pop(path, None)
        shutil.rmtree(path, ignore_errors=True)

    async def clone_bare(self, url, path):
        self._record('clone_bare', url, path)
        os.makedirs(os.path.join(path, '.git'), exist_ok=True)
        self.branches[path] = set(self.initial_branches)

    async def convert_to_working_copy(self, path):
        self._record('convert_to_working_copy', path)

    async def branch_exists(self, path, branch):
        self._record('branch_exists', path, branch)
        return branch in self._branches(path)

    async def rename_branch(self, path, old, new):
        self._record('rename_branch', path, old, new)
        branches = self._branches(path)
        branches.remove(old)
        branches.add(new)

    async def create_placeholder_branch(self, path, branch, author, return_to):
        self._record('create_placeholder_branch', path, branch, author, return_to)
        self._branches(path).add(branch)
        self.placeholders[path] = branch

    async def push_mirror(self, path, url):
        self._record('push_mirror', path, url)
        self.pushed[path] = (url, set(self._branches(path)))

    def call_names(self):
        return [call[0] for call in self.calls]


def make_response(data, status_code=200):
    """Build a successful API response."""
    return APIResponse(
        status_code=status_code,
        data=data,
        headers={'Content-Type': 'application/json'},
        success=200 <= status_code < 300,
    )


def make_summary(slug='demo', days_ago=10, now=NOW, **overrides):
    """Build a repository listing entry updated ``days_ago`` days before ``now``."""
    values = {
        'name': slug.title(),
        'slug': slug,
        'description': f'{slug} repository',
        'is_private': True,
        'updated_on': now - timedelta(days=days_ago),
    }
    values.update(overrides)
    return RepositorySummary(**values)


def make_page(slugs, page=1, has_next=False, now=NOW, days_ago=10):
    """Build the JSON body of a Bitbucket listing page."""
    return {
        'pagelen': 10,
        'page': page,
        'next': f'https://api.bitbucket.org/2.0/repositories/x?page={page + 1}'
        if has_next
        else None,
        'values': [
            {
                'name': slug,
                'slug': slug,
                'description': '',
                'is_private': False,
                'updated_on': (now - timedelta(days=days_ago)).isoformat(),
                'scm': 'git',
            }
            for slug in slugs
        ],
    }


@pytest.fixture
def config(tmp_path):
    """Organization-owned configuration without a team."""
    return Config(
        source={'workspace': 'bb-team', 'username': 'bb-user', 'password': 'bb-pass'},
        destination={
            'workspace': 'acme',
            'username': 'octocat',
            'token': 'gh-token',
        },
        migration={'delay_seconds': 0},
        git={'repositories_dir': str(tmp_path / 'repositories')},
    )


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def bitbucket():
    client = Mock(spec=BitbucketClient)
    client.delete_async.return_value = make_response(None, status_code=204)
    return client


@pytest.fixture
def github():
    client = Mock(spec=GitHubClient)
    client.post_async.return_value = make_response(
        {'name': 'demo', 'html_url': 'https://github.com/acme/demo'},
        status_code=201,
    )
    client.get_async.return_value = make_response(
        [{'name': 'main', 'protected': False}, {'name': 'master', 'protected': False}]
    )
    client.put_async.return_value = make_response({})
    client.patch_async.return_value = make_response({'archived': True})
    return client


@pytest.fixture
def build_context(config, bitbucket, github):
    """Factory building a context for a listing entry against ``config``."""

    def _build(summary=None, cfg=None, **summary_overrides):
        summary = summary or make_summary(**summary_overrides)
        builder = ContextBuilder(cfg or config, bitbucket, github, now=lambda: NOW)
        return builder.build(summary)

    return _build
