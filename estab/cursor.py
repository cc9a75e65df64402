"""
Paginated document sources.

A cursor hands out pages of documents through next_page(), which returns a
list of decoded JSON objects, or None once every page has been returned.
Any exception raised by next_page() ends the export; the producer wraps
errors that are not already FetchError.
"""

import json
import logging
from typing import IO, Any, Dict, Iterable, List, Optional, Protocol, Sequence

from .constants import JSONL_PAGE_SIZE, SCROLL_SIZE, SCROLL_TIMEOUT
from .errors import FetchError

logger = logging.getLogger(__name__)

Document = Dict[str, Any]


class Cursor(Protocol):
    def next_page(self) -> Optional[List[Document]]:
        ...


class ListCursor:
    """
    Cursor over pages held in memory.

    A page given as an exception instance is raised instead of returned,
    which simulates a failing fetch.
    """

    def __init__(self, pages: Iterable[Any]):
        self._pages = iter(pages)
        self.calls = 0

    def next_page(self) -> Optional[List[Document]]:
        self.calls += 1
        page = next(self._pages, None)
        if isinstance(page, BaseException):
            raise page
        if page is None:
            return None
        return list(page)


class JsonLinesCursor:
    """
    Cursor over a JSON Lines stream, one document per line.

    Blank lines are skipped. A line that is not valid JSON, or that does
    not hold a JSON object, raises FetchError with its line number.

    Args:
        stream: Text stream opened for reading
        page_size: Documents returned per page
    """

    def __init__(self, stream: IO[str], page_size: int = JSONL_PAGE_SIZE):
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self._stream = stream
        self._page_size = page_size
        self._line_num = 0
        self._exhausted = False

    def next_page(self) -> Optional[List[Document]]:
        if self._exhausted:
            return None

        page = []
        while len(page) < self._page_size:
            line = self._stream.readline()
            if not line:
                self._exhausted = True
                break
            self._line_num += 1
            line = line.strip()
            if not line:
                continue

            try:
                record = json.loads(line)
            except json.JSONDecodeError as e:
                raise FetchError(f"Line {self._line_num}: Malformed JSON - {str(e)}") from e
            if not isinstance(record, dict):
                raise FetchError(
                    f"Line {self._line_num}: Expected JSON object, got {type(record).__name__}"
                )
            page.append(record)

        if not page and self._exhausted:
            logger.debug(f"Read {self._line_num} lines")
            return None
        return page


class ElasticsearchCursor:
    """
    Cursor over an Elasticsearch scroll.

    The first call runs the search and opens the scroll context; later
    calls continue the scroll until a page comes back empty. Each hit is
    returned as its source merged with the _id, _index and _score metadata.

    Args:
        client: elasticsearch.Elasticsearch instance
        index: Comma separated index names, empty for all indices
        query: Query clause (the value of "query" in a search body)
        fields: Field specifiers; used for source filtering
        size: Hits per page
        scroll: Scroll context keep-alive
    """

    def __init__(
        self,
        client: Any,
        index: str = "",
        query: Optional[Dict[str, Any]] = None,
        fields: Sequence[str] = (),
        size: int = SCROLL_SIZE,
        scroll: str = SCROLL_TIMEOUT,
    ):
        self.client = client
        self.index = index or "_all"
        self.query = query or {"match_all": {}}
        self.source_fields = [f for f in fields if not f.startswith("_")]
        self.size = size
        self.scroll = scroll
        self.scroll_id: Optional[str] = None
        self.total: Optional[int] = None
        self._done = False

    def next_page(self) -> Optional[List[Document]]:
        if self._done:
            return None

        if self.scroll_id is None:
            search_args = dict(index=self.index, query=self.query, size=self.size, scroll=self.scroll)
            if self.source_fields:
                search_args["source_includes"] = self.source_fields
            response = self.client.search(**search_args)
            self.total = _total_hits(response)
            logger.info(f"Query matched {self.total} documents in {self.index}")
        else:
            response = self.client.scroll(scroll_id=self.scroll_id, scroll=self.scroll)

        self.scroll_id = response.get("_scroll_id", self.scroll_id)
        hits = response["hits"]["hits"]
        if not hits:
            self._done = True
            self.close()
            return None
        return [_hit_document(hit) for hit in hits]

    def close(self) -> None:
        """Release the scroll context on the server."""
        if self.scroll_id is None:
            return
        scroll_id, self.scroll_id = self.scroll_id, None
        try:
            self.client.clear_scroll(scroll_id=scroll_id)
        except Exception as e:
            # The context expires on its own after the keep-alive
            logger.warning(f"Could not clear scroll context: {str(e)}")


def _total_hits(response: Dict[str, Any]) -> Optional[int]:
    total = response["hits"].get("total")
    if isinstance(total, dict):
        return total.get("value")
    return total


def _hit_document(hit: Dict[str, Any]) -> Document:
    document = {"_id": hit.get("_id"), "_index": hit.get("_index"), "_score": hit.get("_score")}
    document.update(hit.get("_source") or {})
    return document
