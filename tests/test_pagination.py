import math

import pytest

from skyforge.gateway import Page
from skyforge.pagination import list_all
from skyforge.reporter import ReportLevel


def make_fetch(mocker, total_items, page_size):
    """Serves `total_items` items in pages of `page_size`, chained by tokens."""
    items = [f"item-{i}" for i in range(total_items)]
    chunks = [items[i : i + page_size] for i in range(0, total_items, page_size)] or [[]]

    def fetch(token, size):
        index = int(token) if token else 0
        next_token = str(index + 1) if index + 1 < len(chunks) else None
        return Page(items=chunks[index], next_page_token=next_token)

    return mocker.Mock(side_effect=fetch)


def _warned(reporter):
    return any(
        c.args[0] is ReportLevel.WARNING for c in reporter.report.call_args_list
    )


def test_truncates_at_max_pages(mocker, reporter):
    fetch = make_fetch(mocker, total_items=10, page_size=2)

    items = list_all(fetch, reporter, max_pages=3, page_size=2)

    assert items == [f"item-{i}" for i in range(6)]
    assert fetch.call_count == 3
    assert _warned(reporter)


def test_reads_every_page_under_the_cap(mocker, reporter):
    fetch = make_fetch(mocker, total_items=10, page_size=2)

    items = list_all(fetch, reporter, max_pages=10, page_size=2)

    assert len(items) == 10
    assert fetch.call_count == 5
    assert not _warned(reporter)


def test_first_call_has_no_token_and_passes_page_size(mocker, reporter):
    fetch = make_fetch(mocker, total_items=3, page_size=2)

    list_all(fetch, reporter, max_pages=5, page_size=2)

    assert fetch.call_args_list[0].args == (None, 2)
    assert fetch.call_args_list[1].args == ("1", 2)


def test_empty_first_page(mocker, reporter):
    fetch = mocker.Mock(return_value=Page(items=[], next_page_token=None))

    assert list_all(fetch, reporter, max_pages=3, page_size=2) == []
    assert not _warned(reporter)


def test_empty_token_ends_listing(mocker, reporter):
    fetch = mocker.Mock(return_value=Page(items=["a"], next_page_token=""))

    assert list_all(fetch, reporter) == ["a"]
    assert fetch.call_count == 1


@pytest.mark.parametrize(
    "total,page_size,max_pages",
    [(0, 3, 1), (5, 5, 1), (6, 5, 1), (9, 3, 3), (10, 3, 3), (7, 1, 20)],
)
def test_page_cap_property(mocker, reporter, total, page_size, max_pages):
    fetch = make_fetch(mocker, total_items=total, page_size=page_size)

    items = list_all(fetch, reporter, max_pages=max_pages, page_size=page_size)

    pages_needed = math.ceil(total / page_size)
    if pages_needed <= max_pages:
        assert len(items) == total
        assert not _warned(reporter)
    else:
        assert len(items) == max_pages * page_size
        assert _warned(reporter)
