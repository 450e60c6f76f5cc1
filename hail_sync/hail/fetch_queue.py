"""
Fetch queue processing.

Jobs move starting -> running -> done | error. Each run claims the waiting
jobs in creation order and works through organisation x type units,
persisting progress after every unit so it can be watched from elsewhere.
A failing unit marks the job as error and stops the run; the next run picks
up whatever was queued after it.
"""
from typing import Callable, Dict, List, Optional, Type

from sqlmodel import Session

from hail_sync.core.exceptions import FetchJobFailedError
from hail_sync.core.logging_config import LogCategory, log_error, log_info, log_warning
from hail_sync.hail.client import HailClient
from hail_sync.hail.importers import IMPORTER_REGISTRY, HailImporter, resolve_fetchables
from hail_sync.models.fetch_job import FetchJob
from hail_sync.services.fetch_job_service import FetchJobService

ClientFactory = Callable[[Session], HailClient]


class FetchQueueProcessor:
    """Runs queued fetch jobs against the Hail API."""

    def __init__(
        self,
        session: Session,
        client_factory: Optional[ClientFactory] = None,
        registry: Optional[Dict[str, Type[HailImporter]]] = None,
    ):
        if client_factory is None:
            from hail_sync.hail.service import build_hail_client
            client_factory = build_hail_client

        self.session = session
        self.jobs = FetchJobService(session)
        self.registry = IMPORTER_REGISTRY if registry is None else registry
        self._client_factory = client_factory
        self._client: Optional[HailClient] = None

    def run(self) -> List[FetchJob]:
        """
        Process every waiting job.

        Returns:
            The jobs this worker claimed and finished

        Raises:
            FetchJobFailedError: a job failed; later jobs stay queued
        """
        processed = []
        try:
            for job in self.jobs.pending_jobs():
                if not self.jobs.claim(job):
                    continue
                processed.append(self.process_job(job))
        finally:
            if self._client is not None:
                self._client.close()
                self._client = None

        if processed:
            log_info(f"Processed {len(processed)} fetch job(s)", category=LogCategory.JOBS)
        return processed

    def process_job(self, job: FetchJob) -> FetchJob:
        """Run a claimed job to completion."""
        importers = resolve_fetchables(job.to_fetch, self.registry)
        if not importers:
            log_warning(f"Fetch job {job.id} targets unknown type '{job.to_fetch}', nothing to fetch",
                        category=LogCategory.JOBS)
            return self.jobs.mark_done(job)

        # The job is already running, so any failure from here on must end it as error
        try:
            client = self._get_client()
            org_ids = client.organisation_ids
            if not org_ids:
                log_warning(f"Fetch job {job.id} finished without fetching: no Hail organisations configured",
                            category=LogCategory.JOBS)
                return self.jobs.mark_done(job)

            self.jobs.set_total(job, len(importers) * len(org_ids))
            log_info(f"Running fetch job {job.id}", category=LogCategory.JOBS,
                     to_fetch=job.to_fetch, organisations=len(org_ids), total=job.global_total)

            for org_id in org_ids:
                for importer_cls in importers:
                    importer = importer_cls(self.session)
                    importer.fetch_for_org(client, org_id, job, cursor=None, verbose=True)
                    self.jobs.increment_done(job)
        except Exception as e:
            message = str(e) or type(e).__name__
            self.jobs.mark_error(job, message)
            log_error(e, job_id=job.id, to_fetch=job.to_fetch, units_done=job.global_done)
            raise FetchJobFailedError(job.id, job.global_done, message) from e

        log_info(f"Fetch job {job.id} done", category=LogCategory.JOBS, units_done=job.global_done)
        return self.jobs.mark_done(job)

    def _get_client(self) -> HailClient:
        if self._client is None:
            self._client = self._client_factory(self.session)
        return self._client
