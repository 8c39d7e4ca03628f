"""Landing page storage"""

import json
import uuid
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional
from pydantic import ValidationError
from landify_api.models.business import BusinessData
from landify_api.models.content import FinalContent
from landify_api.models.errors import ApplicationError, ErrorCode
from landify_api.models.schemas import StoredPage

logger = logging.getLogger(__name__)


class PageStore:
    """Stores saved landing pages as {base_path}/{id}.json"""

    def __init__(self, base_path: str):
        self.base_path = Path(base_path).resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)
        logger.info(f"[PageStore] Using path: {self.base_path}")

    def _path(self, page_id: str) -> Optional[Path]:
        """File for a page id; None unless the id is a UUID"""
        try:
            canonical = str(uuid.UUID(page_id))
        except (ValueError, TypeError, AttributeError):
            return None
        return self.base_path / f"{canonical}.json"

    def _write(self, page: StoredPage):
        path = self._path(page.id)
        tmp = path.parent / f"{path.name}.tmp"
        try:
            tmp.write_text(json.dumps(page.to_wire(), indent=2, ensure_ascii=False), encoding="utf-8")
            tmp.replace(path)
        except OSError as e:
            tmp.unlink(missing_ok=True)
            logger.error(f"[PageStore] Failed to write page {page.id}: {e}")
            raise ApplicationError(code=ErrorCode.STORAGE_ERROR, message=f"Failed to save landing page: {e}")

    def save(self, business: BusinessData, content: FinalContent) -> str:
        """Save a new page and return its id"""
        now = datetime.now(timezone.utc)
        page = StoredPage(
            id=str(uuid.uuid4()),
            business_data=business,
            content=content,
            created_at=now,
            updated_at=now,
        )
        self._write(page)
        logger.info(f"[PageStore] Saved page {page.id} for {business.name}")
        return page.id

    def get(self, page_id: str) -> Optional[StoredPage]:
        """Load a page; None if unknown or unreadable"""
        path = self._path(page_id)
        if path is None or not path.exists():
            return None
        try:
            return StoredPage.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.warning(f"[PageStore] Could not read page {page_id}: {e}")
            return None

    def update(self, page_id: str, business: BusinessData, content: FinalContent) -> bool:
        """Replace a page's business data and content; False if it does not exist"""
        existing = self.get(page_id)
        if existing is None:
            return False
        self._write(existing.model_copy(update={
            "business_data": business,
            "content": content,
            "updated_at": datetime.now(timezone.utc),
        }))
        logger.info(f"[PageStore] Updated page {page_id}")
        return True

    def delete(self, page_id: str) -> bool:
        """Remove a page; False if it does not exist"""
        path = self._path(page_id)
        if path is None or not path.exists():
            return False
        try:
            path.unlink()
        except OSError as e:
            raise ApplicationError(code=ErrorCode.STORAGE_ERROR, message=f"Failed to delete landing page: {e}")
        logger.info(f"[PageStore] Deleted page {page_id}")
        return True

    def list_all(self) -> List[StoredPage]:
        """All readable pages, oldest first"""
        pages = [self.get(path.stem) for path in self.base_path.glob("*.json")]
        return sorted((p for p in pages if p is not None), key=lambda p: p.created_at)

    def cleanup_old_pages(self, max_age_days: int = 30) -> int:
        """Delete pages created more than max_age_days ago; returns how many were removed"""
        cutoff = datetime.now(timezone.utc) - timedelta(days=max_age_days)
        deleted = 0
        for page in self.list_all():
            if page.created_at < cutoff and self.delete(page.id):
                deleted += 1
        if deleted:
            logger.info(f"[PageStore] Cleaned up {deleted} pages older than {max_age_days} days")
        return deleted
