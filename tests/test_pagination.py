from __future__ import annotations

from backend_api import Page, clamp_page, total_pages_for

def test_total_pages_from_meta():
    p = Page.from_payload({"items": [1, 2], "meta": {"totalPages": 7, "page": 3}}, page=3, limit=2)
    assert p.total_pages == 7
    assert p.page == 3
    assert p.has_prev and p.has_next

def test_total_pages_from_total():
    p = Page.from_payload({"items": list(range(10)), "meta": {"total": 21}}, page=1, limit=10)
    assert p.total_pages == 3
    assert p.count == 21

def test_bare_list_without_meta():
    p = Page.from_payload([{"id": i} for i in range(25)], page=1, limit=10)
    assert p.total_pages == 3
    assert p.count == 25
    assert p.has_next
    assert [i["id"] for i in p.items] == list(range(10))

def test_bare_list_later_page_is_sliced_locally():
    p = Page.from_payload([{"id": i} for i in range(25)], page=3, limit=10)
    assert p.page == 3
    assert [i["id"] for i in p.items] == [20, 21, 22, 23, 24]
    assert p.has_prev and not p.has_next

def test_bare_list_page_past_end_is_clamped():
    p = Page.from_payload(list(range(4)), page=9, limit=10)
    assert p.page == 1
    assert p.items == [0, 1, 2, 3]

def test_never_more_than_limit_items():
    p = Page.from_payload({"items": list(range(25))}, page=1, limit=10)
    assert len(p.items) == 10

def test_items_with_meta_are_not_resliced():
    # backend уже отдал вторую страницу
    p = Page.from_payload({"items": list(range(10, 20)), "meta": {"total": 25}}, page=2, limit=10)
    assert p.items == list(range(10, 20))
    assert p.total_pages == 3

def test_empty_payload_is_one_page():
    p = Page.from_payload(None, page=1, limit=10)
    assert p.items == [] and p.total_pages == 1
    assert not p.has_next

def test_map_keeps_meta():
    p = Page.from_payload({"items": [1, 2], "meta": {"totalPages": 2, "total": 4}}, page=1, limit=2)
    doubled = p.map(lambda x: x * 2)
    assert doubled.items == [2, 4]
    assert doubled.total_pages == 2 and doubled.total == 4

def test_helpers():
    assert total_pages_for(0, 10) == 1
    assert total_pages_for(11, 10) == 2
    assert clamp_page("abc") == 1
    assert clamp_page(-3) == 1
    assert clamp_page("4") == 4
