"""
Per-type importers and the registry of fetchable Hail object types.

Architecture:
- IMPORTER_REGISTRY: Maps a stable type identifier -> importer class
- HailImporter: Pages an organisation's listing endpoint and upserts records
- Subclasses only declare their model and listing path, plus any follow-up
  fetches (ArticleImporter pulls attached images and videos)

Extension Points:
- Add a model in hail_sync/models/hail_objects.py
- Subclass HailImporter and add it to IMPORTER_REGISTRY
"""
from datetime import datetime
from typing import Any, ClassVar, Dict, List, Optional, Type

from sqlmodel import Session

from hail_sync.core.config import settings
from hail_sync.core.exceptions import UnknownFetchableError
from hail_sync.core.logging_config import LogCategory, log_debug, log_info
from hail_sync.core.time_utils import is_older_than
from hail_sync.hail.client import HailClient, as_list
from hail_sync.models.enums import FETCH_ALL
from hail_sync.models.fetch_job import FetchJob
from hail_sync.models.hail_objects import (
    Article,
    HailObject,
    Image,
    PrivateTag,
    Publication,
    PublicTag,
    Video,
)
from hail_sync.services.fetch_job_service import FetchJobService
from hail_sync.services.hail_object_service import HailObjectService


class HailImporter:
    """Imports one Hail object type for one organisation at a time."""

    identifier: ClassVar[str] = ""
    model: ClassVar[Type[HailObject]] = HailObject
    # Segment under organisations/{org_id}/
    listing_path: ClassVar[str] = ""

    def __init__(self, session: Session, page_size: Optional[int] = None):
        self.session = session
        self.page_size = page_size or settings.hail_page_size
        self.objects = HailObjectService(session)
        self.jobs = FetchJobService(session)

    def listing_endpoint(self, org_id: str) -> str:
        return f"organisations/{org_id}/{self.listing_path}"

    def fetch_for_org(
        self,
        client: HailClient,
        org_id: str,
        job: Optional[FetchJob] = None,
        cursor: Optional[int] = None,
        verbose: bool = False,
    ) -> int:
        """
        Fetch every object of this type for an organisation and upsert it.

        Args:
            client: Authenticated Hail client
            org_id: Hail organisation id
            job: Fetch job to report per-type progress on
            cursor: Listing offset to start from
            verbose: Log a summary per organisation

        Returns:
            Number of records upserted. Running it again updates the same
            records instead of creating new ones.

        Raises:
            HailApiError: a listing page could not be fetched
        """
        org_id = str(org_id)
        if job is not None:
            self.jobs.update_current(job, current_type=self.identifier, current_total=0, current_done=0)

        imported = 0
        # The listing API does not report a total, so current_total grows page by page
        seen = 0
        for page in client.iter_pages(self.listing_endpoint(org_id), self.page_size, offset=cursor or 0):
            seen += len(page)
            for payload in page:
                self.import_item(client, org_id, payload)
                imported += 1
            self.session.commit()
            if job is not None:
                self.jobs.update_current(job, current_total=seen, current_done=imported)
            log_debug(f"Imported page of {len(page)} {self.identifier} item(s)",
                      category=LogCategory.JOBS, org_id=org_id, imported=imported)

        if verbose:
            log_info(f"Fetched {imported} {self.identifier} item(s) for organisation {org_id}",
                     category=LogCategory.JOBS)
        return imported

    def import_item(self, client: HailClient, org_id: str, payload: Dict[str, Any]) -> HailObject:
        existing = self.objects.get_by_hail_id(self.model, str(payload.get("id")))
        previous_fetched_at = existing.fetched_at if existing else None
        record, created = self.objects.upsert(self.model, org_id, payload, commit=False)
        self.after_upsert(client, record, created, previous_fetched_at)
        return record

    def after_upsert(
        self,
        client: HailClient,
        record: HailObject,
        created: bool,
        previous_fetched_at: Optional[datetime],
    ) -> None:
        """Hook for follow-up fetches after a record has been written."""
        pass


class ArticleImporter(HailImporter):
    identifier = "article"
    model = Article
    listing_path = "articles"

    def after_upsert(self, client, record, created, previous_fetched_at):
        # Attachments are only refetched for new articles or when the refresh window has passed
        if not created and not is_older_than(previous_fetched_at, client.get_refresh_rate()):
            return

        org_id = record.hail_org_id
        for payload in as_list(client.get_images_by_article(record.hail_id)):
            self.objects.upsert(Image, org_id, payload, commit=False)
        for payload in as_list(client.get_videos_by_article(record.hail_id)):
            self.objects.upsert(Video, org_id, payload, commit=False)


class PublicationImporter(HailImporter):
    identifier = "publication"
    model = Publication
    listing_path = "publications"


class ImageImporter(HailImporter):
    identifier = "image"
    model = Image
    listing_path = "images"


class VideoImporter(HailImporter):
    identifier = "video"
    model = Video
    listing_path = "videos"


class PublicTagImporter(HailImporter):
    identifier = "public_tag"
    model = PublicTag
    listing_path = "tags"


class PrivateTagImporter(HailImporter):
    identifier = "private_tag"
    model = PrivateTag
    listing_path = "private-tags"


# ================================================================================
# IMPORTER REGISTRY
# ================================================================================

# Maps type identifier -> importer class, in fetch order
IMPORTER_REGISTRY: Dict[str, Type[HailImporter]] = {
    importer.identifier: importer
    for importer in (
        ArticleImporter,
        PublicationImporter,
        ImageImporter,
        VideoImporter,
        PublicTagImporter,
        PrivateTagImporter,
    )
}


def is_fetchable(to_fetch: str, registry: Optional[Dict[str, Type[HailImporter]]] = None) -> bool:
    registry = IMPORTER_REGISTRY if registry is None else registry
    return to_fetch == FETCH_ALL or to_fetch in registry


def resolve_fetchables(
    to_fetch: str,
    registry: Optional[Dict[str, Type[HailImporter]]] = None,
) -> List[Type[HailImporter]]:
    """
    Importers a fetch target stands for.

    "*" expands to the whole registry and a registered identifier to that
    one importer. Anything else resolves to nothing.
    """
    registry = IMPORTER_REGISTRY if registry is None else registry
    if to_fetch == FETCH_ALL:
        return list(registry.values())
    if to_fetch in registry:
        return [registry[to_fetch]]
    return []


def get_importer(identifier: str) -> Type[HailImporter]:
    """
    Get the importer class for a type identifier.

    Raises:
        UnknownFetchableError: the identifier is not registered
    """
    importer = IMPORTER_REGISTRY.get(identifier)
    if not importer:
        raise UnknownFetchableError(
            f"Hail object type '{identifier}' is not supported. "
            f"Supported types: {list(IMPORTER_REGISTRY.keys())}"
        )
    return importer
