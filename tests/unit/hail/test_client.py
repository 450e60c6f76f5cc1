"""
Unit tests for HailClient against an in-process Hail API.
"""
import pytest

from hail_sync.core.exceptions import HailApiError, HailAuthorizationError
from hail_sync.models.hail_objects import Article
from tests.lib.hail_api import FakeHailApi, authorised_state, make_client


class TestRequests:
    def test_requests_carry_bearer_token(self):
        api = FakeHailApi()
        api.add("me", {"id": "user-9"})
        client = make_client(api)

        client.fetch("me")

        assert api.requests[0].headers["Authorization"] == "Bearer access-1"

    def test_get_returns_empty_result_and_reports_notice_on_failure(self):
        api = FakeHailApi()
        api.fail("articles/a1", status_code=500, message="Hail is having a bad day")
        client = make_client(api)

        assert client.get("articles/a1") == {}
        assert client.notices.has_errors
        assert client.notices.last.message == "Hail is having a bad day"

    def test_fetch_raises_with_status_code(self):
        api = FakeHailApi()
        client = make_client(api)

        with pytest.raises(HailApiError) as exc_info:
            client.fetch("articles/missing")

        assert exc_info.value.status_code == 404
        assert client.notices.notices == []

    def test_rejected_token_raises_authorization_error(self):
        api = FakeHailApi()
        api.fail("me", status_code=401, message="Access token expired")
        client = make_client(api)

        with pytest.raises(HailAuthorizationError):
            client.fetch("me")

    def test_get_one_uses_object_endpoint(self):
        api = FakeHailApi()
        api.add("articles/a1", {"id": "a1", "title": "Hello"})
        client = make_client(api)

        assert client.get_one(Article(hail_id="a1")) == {"id": "a1", "title": "Hello"}


class TestApiStatus:
    def test_status_is_recorded_only_when_it_changes(self):
        api = FakeHailApi()
        api.add("me", {"id": "user-1"})
        api.fail("broken", status_code=503)
        recorded = []
        client = make_client(api, status_recorder=recorded.append)

        client.get("me")
        client.get("me")
        client.get("broken")
        client.get("broken")
        client.get("me")

        assert recorded == ["OK", "HTTP 503", "OK"]

    def test_client_errors_keep_status_ok(self):
        api = FakeHailApi()
        recorded = []
        client = make_client(api, status_recorder=recorded.append)

        client.get("does-not-exist")

        assert recorded == ["OK"]


class TestOrganisationsAndTags:
    def _api_with_orgs(self):
        api = FakeHailApi()
        api.add("users/user-1/organisations", [
            {"id": "2", "name": "Zeta Media"},
            {"id": "1", "name": "Alpha News"},
        ])
        api.add("organisations/1/tags", [{"id": "t2", "name": "sport"}, {"id": "t1", "name": "arts"}])
        api.add("organisations/2/tags", [{"id": "t3", "name": "local"}])
        return api

    def test_organisations_are_sorted_by_name(self):
        client = make_client(self._api_with_orgs())

        assert [org["id"] for org in client.get_available_organisations()] == ["1", "2"]
        assert client.get_available_organisations(as_simple_array=True) == {
            "1": "Alpha News",
            "2": "Zeta Media",
        }

    def test_tags_of_several_organisations_are_prefixed_with_org_name(self):
        client = make_client(self._api_with_orgs())

        tags = client.get_available_public_tags(as_simple_array=True)

        assert list(tags.items()) == [
            ("t1", "Alpha News - arts"),
            ("t2", "Alpha News - sport"),
            ("t3", "Zeta Media - local"),
        ]

    def test_tags_of_single_organisation_are_not_prefixed(self):
        client = make_client(self._api_with_orgs(), state=authorised_state(organisation_ids=("1",)))

        assert client.get_available_public_tags(as_simple_array=True) == {"t1": "arts", "t2": "sport"}

    def test_full_tag_list_is_merged_and_sorted(self):
        client = make_client(self._api_with_orgs())

        tags = client.get_available_public_tags()

        assert [tag["name"] for tag in tags] == ["arts", "local", "sport"]

    def test_tags_without_organisations_report_notice(self):
        client = make_client(FakeHailApi(), state=authorised_state(organisation_ids=()))

        assert client.get_available_private_tags() is None
        assert "at least 1 Hail Organisation" in client.notices.last.message

    def test_set_user_id_stores_user(self):
        api = FakeHailApi()
        api.add("me", {"id": 42, "name": "Editor"})
        client = make_client(api, state=authorised_state(user_id=None))

        assert client.set_user_id() == "42"
        assert client.user_id == "42"


class TestPaging:
    def test_iter_pages_walks_offsets_until_short_page(self):
        api = FakeHailApi()
        api.add("organisations/1/images", [{"id": f"i{n}"} for n in range(5)])
        client = make_client(api)

        pages = list(client.iter_pages("organisations/1/images", page_size=2))

        assert [len(page) for page in pages] == [2, 2, 1]
        offsets = [int(r.url.params["offset"]) for r in api.requests_for("organisations/1/images")]
        assert offsets == [0, 2, 4]

    def test_iter_pages_stops_when_offset_is_ignored(self):
        api = FakeHailApi()
        api.add("organisations/1/tags", lambda request: [{"id": "t1"}, {"id": "t2"}])
        client = make_client(api)

        pages = list(client.iter_pages("organisations/1/tags", page_size=2))

        assert len(pages) == 1
        assert len(api.requests_for("organisations/1/tags")) == 2
