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

"""Record lookup over APIs that only offer paginated listings."""

from loguru import logger
from pulsemcp.common.consts import DEFAULT_SCAN_PAGE_SIZE
from pulsemcp.common.errors import RecordNotFoundError
from typing import Awaitable, Callable, Sequence, TypeVar


T = TypeVar('T')


async def find_in_pages(
    fetch_page: Callable[[int, int], Awaitable[Sequence[T]]],
    predicate: Callable[[T], bool],
    not_found_message: str,
    page_size: int = DEFAULT_SCAN_PAGE_SIZE,
) -> T:
    """Scan a paginated listing until a record matches.

    Pages are requested with `fetch_page(limit, offset)` starting at offset 0.
    The scan returns the first matching record and stops once a page comes
    back shorter than `page_size`. Errors raised by `fetch_page` propagate.

    The remote listing must keep a stable order between calls, otherwise a
    record can be skipped or seen twice.

    Args:
        fetch_page: Coroutine function returning one page of records
        predicate: Returns True for the record being looked up
        not_found_message: Message of the RecordNotFoundError
        page_size: Number of records requested per page

    Returns:
        The first record satisfying the predicate

    Raises:
        RecordNotFoundError: If the listing ends without a match
    """
    if page_size < 1:
        raise ValueError('page_size must be a positive integer')

    offset = 0
    pages = 0
    while True:
        page = await fetch_page(page_size, offset)
        pages += 1
        for record in page:
            if predicate(record):
                logger.debug(f'Record found on page {pages} (offset {offset})')
                return record
        if len(page) < page_size:
            logger.debug(f'Listing exhausted after {pages} pages')
            raise RecordNotFoundError(not_found_message)
        offset += page_size
