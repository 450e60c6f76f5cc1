"""
Hail OAuth token management.

The token state is an immutable snapshot. Every change produces a new
snapshot with a bumped version, and the store only accepts it when the
version it replaces is still current. On a conflict the manager reapplies
only the fields it changed to the stored snapshot, so concurrent writers
never overwrite each other's fields.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional, Protocol, Tuple
from urllib.parse import urlencode

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from hail_sync.core.config import HAIL_SCOPES, Settings
from hail_sync.core.exceptions import TokenStateConflictError
from hail_sync.core.logging_config import LogCategory, log_info, log_warning
from hail_sync.core.time_utils import seconds_until, utc_now
from hail_sync.hail.notices import NoticeSink

TOKEN_ENDPOINT = "oauth/access_token"
DEFAULT_REFRESH_THRESHOLD = timedelta(minutes=15)
MAX_SAVE_ATTEMPTS = 3


class TokenState(BaseModel):
    """Snapshot of the OAuth state shared by the deployment."""
    model_config = ConfigDict(frozen=True)

    access_token: Optional[str] = None
    access_token_expire: Optional[datetime] = None
    refresh_token: Optional[str] = None
    user_id: Optional[str] = None
    organisation_ids: Tuple[str, ...] = ()
    version: int = 0


class TokenResponse(BaseModel):
    """Successful reply from the Hail token endpoint."""
    access_token: str
    refresh_token: str
    expires_in: int


class TokenStore(Protocol):
    def load(self) -> TokenState:
        ...

    def save(self, state: TokenState, expected_version: int) -> TokenState:
        """Persist state if the stored version still equals expected_version."""
        ...


@dataclass(frozen=True)
class HailCredentials:
    client_id: Optional[str]
    client_secret: Optional[str]

    @classmethod
    def from_settings(cls, settings: Settings) -> "HailCredentials":
        return cls(client_id=settings.hail_client_id, client_secret=settings.hail_client_secret)


class TokenManager:
    """
    Holds client credentials and the current token pair.

    Failures talking to the token endpoint are reported to the notice sink
    and never raised: callers get the previous (possibly stale or empty)
    token and must cope with it.
    """

    def __init__(
        self,
        credentials: HailCredentials,
        store: TokenStore,
        http: httpx.Client,
        notices: NoticeSink,
        redirect_url: str,
        authorization_url: str,
        refresh_threshold: timedelta = DEFAULT_REFRESH_THRESHOLD,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.credentials = credentials
        self.store = store
        self.http = http
        self.notices = notices
        self.redirect_url = redirect_url
        self.authorization_url = authorization_url
        self.refresh_threshold = refresh_threshold
        self._clock = clock
        self._state = store.load()

    @property
    def state(self) -> TokenState:
        return self._state

    def reload(self) -> TokenState:
        self._state = self.store.load()
        return self._state

    def is_authorised(self) -> bool:
        state = self._state
        return bool(state.access_token_expire and state.access_token and state.refresh_token)

    def is_ready_to_authorise(self) -> bool:
        return bool(self.credentials.client_id and self.credentials.client_secret)

    def get_authorization_url(self) -> str:
        params = {
            "client_id": self.credentials.client_id or "",
            "redirect_uri": self.redirect_url,
            "response_type": "code",
            "scope": HAIL_SCOPES,
        }
        return f"{self.authorization_url}?{urlencode(params)}"

    def needs_refresh(self) -> bool:
        remaining = seconds_until(self._state.access_token_expire, self._clock())
        return remaining < self.refresh_threshold.total_seconds()

    def get_access_token(self) -> Optional[str]:
        """Return the access token, refreshing it first when it is close to expiry."""
        if self.needs_refresh():
            self.refresh_access_token()
        return self._state.access_token

    def refresh_access_token(self) -> bool:
        if not self._state.refresh_token:
            self.notices.report("Hail is not authorised yet; no refresh token available")
            return False
        return self._request_tokens({
            "grant_type": "refresh_token",
            "refresh_token": self._state.refresh_token,
        })

    def fetch_access_token(self, authorization_code: str) -> bool:
        """Exchange an authorization code from the OAuth callback for a token pair."""
        return self._request_tokens({
            "grant_type": "authorization_code",
            "code": authorization_code,
            "redirect_uri": self.redirect_url,
        })

    def set_user_id(self, user_id: str) -> TokenState:
        return self._persist({"user_id": user_id})

    def set_organisation_ids(self, organisation_ids) -> TokenState:
        return self._persist({"organisation_ids": tuple(str(org_id) for org_id in organisation_ids)})

    def _request_tokens(self, grant: Dict[str, str]) -> bool:
        post_data = {
            "client_id": self.credentials.client_id,
            "client_secret": self.credentials.client_secret,
            **grant,
        }
        grant_type = grant["grant_type"]
        try:
            response = self.http.post(TOKEN_ENDPOINT, data=post_data)
            response.raise_for_status()
            tokens = TokenResponse.model_validate(response.json())
        except (httpx.HTTPError, ValidationError, ValueError) as e:
            self.notices.handle_exception(e, grant_type=grant_type)
            return False

        try:
            self._persist({
                "access_token": tokens.access_token,
                "refresh_token": tokens.refresh_token,
                "access_token_expire": self._clock() + timedelta(seconds=tokens.expires_in),
            })
        except TokenStateConflictError as e:
            log_warning(f"Could not store new Hail tokens: {e}", category=LogCategory.HAIL_API,
                        grant_type=grant_type)
            self.reload()
            return False

        log_info("Stored new Hail access token", category=LogCategory.HAIL_API,
                 grant_type=grant_type, expires_in=tokens.expires_in)
        return True

    def _persist(self, changes: Dict) -> TokenState:
        """
        Apply changes on top of the current snapshot and save it.

        On a version conflict the changes are reapplied to the freshly loaded
        snapshot, so writes to other fields (organisations, user id) made
        in between are kept and these changes still land.
        """
        for attempt in range(1, MAX_SAVE_ATTEMPTS + 1):
            current = self._state
            new_state = current.model_copy(update={**changes, "version": current.version + 1})
            try:
                self._state = self.store.save(new_state, expected_version=current.version)
                return self._state
            except TokenStateConflictError as e:
                if attempt == MAX_SAVE_ATTEMPTS:
                    raise
                log_warning(f"{e}, retrying on the stored snapshot", category=LogCategory.HAIL_API,
                            fields=sorted(changes))
                self.reload()
