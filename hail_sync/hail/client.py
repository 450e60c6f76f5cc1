"""
API client for the Hail API.

Requests are authenticated with the bearer token from TokenManager, which
refreshes it transparently when it is about to expire.

Two request flavours exist:
- fetch(): strict, raises HailApiError. Used by importers so a failed page
  aborts the fetch job instead of leaving it half-indexed.
- get(): soft, reports the failure to the notice sink and returns an empty
  result. An empty result therefore means "failed" as often as "no data";
  check client.notices to tell them apart.
"""
from typing import Any, Callable, Dict, Iterator, List, Optional

import httpx

from hail_sync.core.exceptions import HailApiError, HailAuthorizationError
from hail_sync.core.logging_config import LogCategory, log_debug
from hail_sync.hail.notices import NoticeSink, error_message_from_response
from hail_sync.hail.tokens import TokenManager
from hail_sync.models.enums import API_STATUS_OK
from hail_sync.models.hail_objects import Article, HailObject, Image, Video


def as_list(payload: Any) -> List[Dict[str, Any]]:
    """Listing endpoints answer with a JSON array; anything else counts as no items."""
    return payload if isinstance(payload, list) else []


class HailClient:
    """Authenticated JSON client for the Hail API."""

    def __init__(
        self,
        tokens: TokenManager,
        http: httpx.Client,
        notices: NoticeSink,
        refresh_rate: int,
        status_recorder: Optional[Callable[[str], None]] = None,
    ):
        self.tokens = tokens
        self.http = http
        self.notices = notices
        self.refresh_rate = refresh_rate
        self._status_recorder = status_recorder
        self._last_status: Optional[str] = None

    def __enter__(self) -> "HailClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.http.close()

    @property
    def user_id(self) -> Optional[str]:
        return self.tokens.state.user_id

    @property
    def organisation_ids(self) -> List[str]:
        return list(self.tokens.state.organisation_ids)

    def get_refresh_rate(self) -> int:
        """
        Refresh rate in seconds for Hail objects. Objects that have not been
        retrieved for longer than this should be fetched again.
        """
        return self.refresh_rate

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def fetch(self, uri: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET a resource and decode its JSON body, raising HailApiError on any failure."""
        headers = {"Authorization": f"Bearer {self.tokens.get_access_token() or ''}"}
        log_debug(f"GET {uri}", category=LogCategory.HAIL_API, params=params)

        try:
            response = self.http.get(uri, params=params, headers=headers)
        except httpx.HTTPError as e:
            self._record_status(f"Unreachable: {type(e).__name__}")
            raise HailApiError(f"Request to Hail failed for {uri}: {e}") from e

        if response.is_error:
            message = error_message_from_response(response) or (
                f"Hail API returned HTTP {response.status_code} for {uri}"
            )
            # 4xx means the API is up and answering; only 5xx marks it down
            self._record_status(
                f"HTTP {response.status_code}" if response.status_code >= 500 else API_STATUS_OK
            )
            if response.status_code == 401:
                raise HailAuthorizationError(message, status_code=401)
            raise HailApiError(message, status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            self._record_status("Malformed response")
            raise HailApiError(f"Hail API returned malformed JSON for {uri}") from e

        self._record_status(API_STATUS_OK)
        return payload

    def get(self, uri: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Send a GET request and return the decoded reply.

        On failure the error goes to the notice sink and an empty dict is
        returned so callers keep running.
        """
        try:
            return self.fetch(uri, params)
        except HailApiError as e:
            self.notices.handle_exception(e, uri=uri, status_code=e.status_code)
            return {}

    def get_one(self, hail_object: HailObject) -> Any:
        """Get one Hail object from the API."""
        return self.get(f"{hail_object.object_endpoint}/{hail_object.hail_id}")

    def iter_pages(self, uri: str, page_size: int, offset: int = 0) -> Iterator[List[Dict[str, Any]]]:
        """
        Yield successive pages of a listing endpoint using limit/offset.

        Stops on a short page, or when the API ignores the offset and serves
        the same page again.
        """
        previous_first_id = None
        while True:
            items = as_list(self.fetch(uri, params={"limit": page_size, "offset": offset}))
            first_id = items[0].get("id") if items else None
            if items and first_id is not None and first_id == previous_first_id:
                return
            if items:
                yield items
            if len(items) < page_size:
                return
            previous_first_id = first_id
            offset += len(items)

    # ------------------------------------------------------------------
    # Account, organisations and tags
    # ------------------------------------------------------------------

    def set_user_id(self) -> Optional[str]:
        """Look up the authorising Hail user and store its id."""
        response = self.get("me")
        if not isinstance(response, dict) or "id" not in response:
            return None
        user_id = str(response["id"])
        self.tokens.set_user_id(user_id)
        return user_id

    def get_available_organisations(self, as_simple_array: bool = False):
        """
        Organisations the authorising user belongs to, ordered by name.

        With as_simple_array, returns {id: name} instead of the full payloads.
        """
        organisations = sorted(
            as_list(self.get(f"users/{self.user_id}/organisations")),
            key=lambda org: str(org.get("name") or ""),
        )
        if as_simple_array:
            return {str(org["id"]): org.get("name") or "" for org in organisations}
        return organisations

    def get_available_private_tags(self, organisations: Optional[Dict[str, str]] = None, as_simple_array: bool = False):
        return self._get_available_tags("private-tags", organisations, as_simple_array)

    def get_available_public_tags(self, organisations: Optional[Dict[str, str]] = None, as_simple_array: bool = False):
        return self._get_available_tags("tags", organisations, as_simple_array)

    def _get_available_tags(self, endpoint: str, organisations: Optional[Dict[str, str]], as_simple_array: bool):
        """
        Merge the tags of several organisations.

        organisations maps org id to name; when omitted, the configured
        organisations are used. Simple results map tag id to title, with the
        organisation name prefixed when more than one organisation is involved.
        """
        org_ids = [str(org_id) for org_id in organisations] if organisations else self.organisation_ids
        if not org_ids:
            self.notices.report(
                "You need at least 1 Hail Organisation configured to be able to fetch tags"
            )
            return None

        prefix_org_name = len(org_ids) > 1
        org_names = dict(organisations or {})
        if prefix_org_name and not org_names:
            org_names = self.get_available_organisations(as_simple_array=True)

        if not as_simple_array:
            merged: List[Dict[str, Any]] = []
            for org_id in org_ids:
                merged = as_list(self.get(f"organisations/{org_id}/{endpoint}")) + merged
            return sorted(merged, key=lambda tag: str(tag.get("name") or ""))

        tag_list: Dict[str, str] = {}
        for org_id in org_ids:
            for tag in as_list(self.get(f"organisations/{org_id}/{endpoint}")):
                title = tag.get("name") or ""
                if prefix_org_name:
                    title = f"{org_names.get(org_id, '')} - {title}"
                tag_list[str(tag["id"])] = title
        return dict(sorted(tag_list.items(), key=lambda item: item[1]))

    # ------------------------------------------------------------------
    # Article attachments
    # ------------------------------------------------------------------

    def get_images_by_article(self, article_id: str) -> Any:
        """Retrieve the images attached to an article."""
        return self.fetch(f"{Article.object_endpoint}/{article_id}/{Image.object_endpoint}")

    def get_videos_by_article(self, article_id: str) -> Any:
        """Retrieve the videos attached to an article."""
        return self.fetch(f"{Article.object_endpoint}/{article_id}/{Video.object_endpoint}")

    def _record_status(self, status: str) -> None:
        # Only write when the status changes, not once per request
        if status == self._last_status:
            return
        self._last_status = status
        if self._status_recorder is not None:
            self._status_recorder(status)
