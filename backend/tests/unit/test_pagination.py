import pytest

from hive.domain.pagination import PageParams, page_payload, pagination_meta


@pytest.mark.parametrize("page,limit,skip", [(1, 10, 0), (2, 10, 10), (3, 25, 50)])
def test_skip(page, limit, skip):
	assert PageParams(page=page, limit=limit).skip == skip


@pytest.mark.parametrize("total,pages", [(0, 0), (1, 1), (10, 1), (11, 2), (95, 10)])
def test_pages_round_up(total, pages):
	assert pagination_meta(PageParams(page=1, limit=10), total)["pages"] == pages


def test_page_payload_shape():
	body = page_payload("threads", [{"id": "a"}], PageParams(page=2, limit=1), 3)
	assert body == {
		"threads": [{"id": "a"}],
		"pagination": {"page": 2, "limit": 1, "total": 3, "pages": 3},
	}
