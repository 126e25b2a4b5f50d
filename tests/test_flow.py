"""Tests for flow control over the repository stream."""

from unittest.mock import AsyncMock, patch

import pytest

from bitbucket_migrate.migration.flow import (
    apply_flow_control,
    delay_each,
    skip_excluded,
    take,
)

from conftest import make_summary


class CountingSource:
    """Async iterable recording how many items were pulled."""

    def __init__(self, slugs):
        self.slugs = list(slugs)
        self.pulled = 0

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for slug in self.slugs:
            self.pulled += 1
            yield make_summary(slug)


async def _slugs(stream):
    return [repository.slug async for repository in stream]


class TestTake:
    @pytest.mark.asyncio
    async def test_stops_pulling_after_limit(self):
        source = CountingSource(['a', 'b', 'c', 'd'])

        assert await _slugs(take(source, 2)) == ['a', 'b']
        assert source.pulled == 2

    @pytest.mark.asyncio
    async def test_limit_larger_than_source(self):
        source = CountingSource(['a', 'b'])

        assert await _slugs(take(source, 500)) == ['a', 'b']

    @pytest.mark.asyncio
    async def test_zero_limit_pulls_nothing(self):
        source = CountingSource(['a'])

        assert await _slugs(take(source, 0)) == []
        assert source.pulled == 0


class TestSkipExcluded:
    @pytest.mark.asyncio
    async def test_drops_excluded_slugs(self):
        source = CountingSource(['a', 'b', 'c'])

        assert await _slugs(skip_excluded(source, {'b'})) == ['a', 'c']

    @pytest.mark.asyncio
    async def test_matching_is_exact(self):
        source = CountingSource(['demo', 'demo-2', 'Demo'])

        assert await _slugs(skip_excluded(source, {'demo'})) == ['demo-2', 'Demo']


class TestDelayEach:
    @pytest.mark.asyncio
    async def test_sleeps_before_each_item(self):
        events = []

        async def fake_sleep(seconds):
            events.append(('sleep', seconds))

        with patch(
            'bitbucket_migrate.migration.flow.asyncio.sleep',
            new=AsyncMock(side_effect=fake_sleep),
        ):
            async for repository in delay_each(CountingSource(['a', 'b']), 1.0):
                events.append(('item', repository.slug))

        assert events == [
            ('sleep', 1.0),
            ('item', 'a'),
            ('sleep', 1.0),
            ('item', 'b'),
        ]

    @pytest.mark.asyncio
    async def test_zero_delay_does_not_sleep(self):
        with patch(
            'bitbucket_migrate.migration.flow.asyncio.sleep', new=AsyncMock()
        ) as mock_sleep:
            assert await _slugs(delay_each(CountingSource(['a']), 0)) == ['a']

        mock_sleep.assert_not_called()


class TestApplyFlowControl:
    @pytest.mark.asyncio
    async def test_cap_applies_before_exclusion(self):
        source = CountingSource(['a', 'b', 'c', 'd'])

        stream = apply_flow_control(source, max_items=3, excluded=['b'])

        assert await _slugs(stream) == ['a', 'c']
        assert source.pulled == 3

    @pytest.mark.asyncio
    async def test_delay_applies_to_remaining_items_only(self):
        with patch(
            'bitbucket_migrate.migration.flow.asyncio.sleep', new=AsyncMock()
        ) as mock_sleep:
            stream = apply_flow_control(
                CountingSource(['a', 'b', 'c']), max_items=500, excluded=['b'], delay=1
            )
            assert await _slugs(stream) == ['a', 'c']

        assert mock_sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_everything_excluded(self):
        stream = apply_flow_control(
            CountingSource(['a', 'b']), max_items=500, excluded=['a', 'b']
        )

        assert await _slugs(stream) == []
