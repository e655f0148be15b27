# Copyright PulseMCP contributors. All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Tests for find_in_pages."""

import math
import pytest
from pulsemcp.common.errors import ApiError, RecordNotFoundError
from pulsemcp.common.pagination import find_in_pages


class RecordingListing:
    """A paginated listing over a list of records that counts fetches."""

    def __init__(self, records, fail_at_offset=None):
        """Initialize with the records and an optional failing offset."""
        self.records = records
        self.fail_at_offset = fail_at_offset
        self.calls = []

    async def fetch_page(self, limit, offset):
        """Return the records in [offset, offset + limit)."""
        self.calls.append((limit, offset))
        if offset == self.fail_at_offset:
            raise ApiError(429, 'Rate limit exceeded. Please try again later.')
        return self.records[offset : offset + limit]


def _records(count):
    return [{'id': str(index), 'number': index + 100} for index in range(count)]


@pytest.mark.asyncio
async def test_found_on_first_page():
    """A record on the first page needs one fetch."""
    listing = RecordingListing(_records(7))

    record = await find_in_pages(
        listing.fetch_page, lambda r: r['id'] == '1', 'missing', page_size=3
    )

    assert record['id'] == '1'
    assert listing.calls == [(3, 0)]


@pytest.mark.asyncio
@pytest.mark.parametrize('index,expected_fetches', [(3, 2), (5, 2), (6, 3)])
async def test_found_on_page_k(index, expected_fetches):
    """A record on page k is found after exactly k fetches."""
    listing = RecordingListing(_records(7))

    record = await find_in_pages(
        listing.fetch_page, lambda r: r['id'] == str(index), 'missing', page_size=3
    )

    assert record['id'] == str(index)
    assert len(listing.calls) == expected_fetches
    assert [offset for _, offset in listing.calls] == [
        3 * page for page in range(expected_fetches)
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize('count,page_size', [(7, 3), (1, 50), (0, 50), (121, 50)])
async def test_not_found_after_all_pages(count, page_size):
    """A missing record fails after ceil(N / P) fetches when N is not a multiple of P."""
    listing = RecordingListing(_records(count))

    with pytest.raises(RecordNotFoundError, match='Incident 999 not found'):
        await find_in_pages(
            listing.fetch_page,
            lambda r: r['id'] == '999',
            'Incident 999 not found',
            page_size=page_size,
        )

    assert len(listing.calls) == max(1, math.ceil(count / page_size))


@pytest.mark.asyncio
async def test_exact_multiple_needs_one_more_fetch():
    """A full last page is followed by one empty fetch."""
    listing = RecordingListing(_records(6))

    with pytest.raises(RecordNotFoundError):
        await find_in_pages(listing.fetch_page, lambda r: False, 'missing', page_size=3)

    assert len(listing.calls) == 3


@pytest.mark.asyncio
async def test_first_match_wins():
    """The first matching record in listing order is returned."""
    listing = RecordingListing(_records(7))

    record = await find_in_pages(
        listing.fetch_page, lambda r: r['number'] >= 102, 'missing', page_size=3
    )

    assert record['id'] == '2'


@pytest.mark.asyncio
async def test_fetch_errors_propagate():
    """An error while fetching a page ends the scan with that error."""
    listing = RecordingListing(_records(10), fail_at_offset=3)

    with pytest.raises(ApiError, match='Rate limit exceeded'):
        await find_in_pages(listing.fetch_page, lambda r: False, 'missing', page_size=3)

    assert len(listing.calls) == 2


@pytest.mark.asyncio
async def test_rejects_invalid_page_size():
    """The page size must be positive."""
    listing = RecordingListing(_records(3))

    with pytest.raises(ValueError):
        await find_in_pages(listing.fetch_page, lambda r: True, 'missing', page_size=0)

    assert listing.calls == []
