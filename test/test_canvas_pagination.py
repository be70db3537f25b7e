import asyncio

import httpx

from integration.canvas_client import parse_link_header

BASE = "https://canvas.test"


def _paged_handler(pages, fail=(), links=None):
    """pages: {url: body}; links: {url: next url}; fail: urls that return 500."""
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        seen.append(url)
        if url in fail:
            return httpx.Response(500, json={"errors": ["boom"]})
        headers = {}
        nxt = (links or {}).get(url)
        if nxt:
            headers["link"] = f'<{BASE}/first>; rel="first", <{nxt}>; rel="next"'
        return httpx.Response(200, json=pages[url], headers=headers)

    return handler, seen


def test_parse_link_header():
    parsed = parse_link_header(
        '<https://c/x?page=2>; rel="next", <https://c/x?page=1>; rel="first",'
        ' <https://c/x?page=9>; rel="last"'
    )
    assert parsed["next"] == "https://c/x?page=2"
    assert parsed["last"] == "https://c/x?page=9"
    assert parse_link_header("") == {}
    assert parse_link_header(None) == {}


def test_pages_concatenated_in_link_order(mock_client_factory):
    p1, p2, p3 = f"{BASE}/items", f"{BASE}/items?page=2", f"{BASE}/items?page=3"
    handler, seen = _paged_handler(
        {p1: [1, 2], p2: [3], p3: [4, 5]},
        links={p1: p2, p2: p3},
    )
    client = mock_client_factory(handler)

    out = asyncio.run(client.get_paginated(p1, recurse=True))

    assert out == [1, 2, 3, 4, 5]
    assert seen == [p1, p2, p3]


def test_without_recurse_only_first_page(mock_client_factory):
    p1, p2 = f"{BASE}/items", f"{BASE}/items?page=2"
    handler, seen = _paged_handler({p1: [1], p2: [2]}, links={p1: p2})
    client = mock_client_factory(handler)

    assert asyncio.run(client.get_paginated(p1)) == [1]
    assert seen == [p1]


def test_next_pointing_to_same_url_terminates(mock_client_factory):
    p1 = f"{BASE}/items"
    handler, seen = _paged_handler({p1: [1]}, links={p1: p1})
    client = mock_client_factory(handler)

    assert asyncio.run(client.get_paginated(p1, recurse=True)) == [1]
    assert seen == [p1]


def test_relative_first_url_with_absolute_self_link(mock_client_factory):
    p1 = f"{BASE}/items"
    handler, seen = _paged_handler({p1: [1]}, links={p1: p1})
    client = mock_client_factory(handler)

    assert asyncio.run(client.get_paginated("/items", recurse=True)) == [1]
    assert len(seen) == 1


def test_cycle_back_to_earlier_page_terminates(mock_client_factory):
    p1, p2 = f"{BASE}/items", f"{BASE}/items?page=2"
    handler, seen = _paged_handler({p1: [1], p2: [2]}, links={p1: p2, p2: p1})
    client = mock_client_factory(handler)

    assert asyncio.run(client.get_paginated(p1, recurse=True)) == [1, 2]
    assert seen == [p1, p2]


def test_failed_page_keeps_earlier_pages(mock_client_factory):
    p1, p2, p3 = f"{BASE}/items", f"{BASE}/items?page=2", f"{BASE}/items?page=3"
    handler, _ = _paged_handler(
        {p1: [1, 2], p2: [3], p3: [4]},
        links={p1: p2, p2: p3},
        fail={p3},
    )
    client = mock_client_factory(handler)

    assert asyncio.run(client.get_paginated(p1, recurse=True)) == [1, 2, 3]


def test_failed_first_page_is_empty(mock_client_factory):
    p1 = f"{BASE}/items"
    handler, _ = _paged_handler({p1: [1]}, fail={p1})
    client = mock_client_factory(handler)

    assert asyncio.run(client.get_paginated(p1, recurse=True)) == []


def test_network_error_is_swallowed(mock_client_factory):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = mock_client_factory(handler)
    assert asyncio.run(client.get_paginated(f"{BASE}/items", recurse=True)) == []


def test_undecodable_page_ends_walk(mock_client_factory):
    p1, p2 = f"{BASE}/items", f"{BASE}/items?page=2"

    def handler(request):
        if str(request.url) == p1:
            return httpx.Response(200, json=[1], headers={"link": f'<{p2}>; rel="next"'})
        return httpx.Response(200, content=b"<html>not json</html>")

    client = mock_client_factory(handler)
    assert asyncio.run(client.get_paginated(p1, recurse=True)) == [1]


def test_large_ids_are_exact(mock_client_factory):
    def handler(request):
        return httpx.Response(
            200,
            content=b'[{"plannable_id": 123456789012345678901}]',
            headers={"content-type": "application/json"},
        )

    client = mock_client_factory(handler)
    out = asyncio.run(client.get_paginated(f"{BASE}/items"))
    assert out[0]["plannable_id"] == 123456789012345678901


def test_planner_items_request(mock_client_factory):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=[])

    client = mock_client_factory(handler)
    asyncio.run(client.get_planner_items("2024-03-03", "2024-03-11"))

    req = seen[0]
    assert req.url.path == "/api/v1/planner/items"
    assert req.url.params["start_date"] == "2024-03-03"
    assert req.url.params["end_date"] == "2024-03-11"
    assert req.url.params["per_page"] == "1000"
    assert req.headers["authorization"] == "Bearer secret"
