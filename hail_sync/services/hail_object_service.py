"""
Service for local copies of Hail objects.
"""
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar

from sqlalchemy import func
from sqlmodel import Session, select

from hail_sync.models.hail_objects import HailObject

HailObjectT = TypeVar("HailObjectT", bound=HailObject)


class HailObjectService:
    """Upsert and read Hail object records keyed by hail_id."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_hail_id(self, model: Type[HailObjectT], hail_id: str) -> Optional[HailObjectT]:
        return self.session.exec(
            select(model).where(model.hail_id == str(hail_id))
        ).first()

    def upsert(
        self,
        model: Type[HailObjectT],
        org_id: Optional[str],
        payload: Dict[str, Any],
        commit: bool = True,
    ) -> Tuple[HailObjectT, bool]:
        """
        Create or update the record for payload["id"].

        Returns the record and whether it was newly created. Existing records
        are overwritten with the payload so fields always match the latest
        fetch.
        """
        hail_id = payload.get("id")
        if hail_id is None:
            raise ValueError(f"{model.__name__} payload has no id")

        record = self.get_by_hail_id(model, str(hail_id))
        created = record is None
        if created:
            record = model(hail_id=str(hail_id))

        record.apply_payload(payload, org_id=org_id)
        self.session.add(record)
        if commit:
            self.session.commit()
            self.session.refresh(record)
        return record, created

    def list_objects(self, model: Type[HailObjectT], limit: int = 50, offset: int = 0) -> List[HailObjectT]:
        """Records ordered by title, then hail_id for a stable order."""
        return list(self.session.exec(
            select(model)
            .order_by(model.title, model.hail_id)
            .offset(offset)
            .limit(limit)
        ).all())

    def count(self, model: Type[HailObjectT]) -> int:
        return self.session.exec(select(func.count()).select_from(model)).one()
