"""
Unit tests for HailObjectService.
"""
import pytest

from hail_sync.models.hail_objects import Publication, PublicTag
from hail_sync.services.hail_object_service import HailObjectService


def test_upsert_creates_then_updates(session):
    service = HailObjectService(session)

    created_record, created = service.upsert(Publication, "1", {"id": 77, "title": "Spring", "url": "https://a"})
    updated_record, updated_created = service.upsert(Publication, "1", {"id": 77, "title": "Summer"})

    assert created is True
    assert updated_created is False
    assert created_record.id == updated_record.id
    assert updated_record.hail_id == "77"
    assert updated_record.title == "Summer"
    assert updated_record.url is None
    assert service.count(Publication) == 1


def test_upsert_requires_id(session):
    with pytest.raises(ValueError):
        HailObjectService(session).upsert(PublicTag, "1", {"name": "no id"})


def test_list_objects_orders_by_title_and_pages(session):
    service = HailObjectService(session)
    for hail_id, name in (("t1", "sport"), ("t2", "arts"), ("t3", "local")):
        service.upsert(PublicTag, "1", {"id": hail_id, "name": name})

    assert [tag.title for tag in service.list_objects(PublicTag)] == ["arts", "local", "sport"]
    assert [tag.title for tag in service.list_objects(PublicTag, limit=1, offset=1)] == ["local"]
    assert service.get_by_hail_id(PublicTag, "t3").title == "local"
