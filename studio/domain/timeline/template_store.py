"""Template store - validated, cached access to timeline templates"""

import logging
from typing import Any, Optional, Union

from pydantic import ValidationError
from sqlalchemy.orm import Session

from ...cache import Cache, build_template_key, invalidate_template_cache
from ...config import TEMPLATE_CACHE_TTL
from ...models import TimelineTemplate
from ...shared.validators import clean_label
from .errors import InvalidTemplateError, NoTemplateError
from .repository import TimelineRepository
from .schemas import TimelineTemplateIn, TimelineTemplateResponse

logger = logging.getLogger(__name__)


def _format_validation_error(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        problems.append(f"{location}: {error.get('msg')}" if location else error.get("msg", ""))
    return "; ".join(problems)


def _to_response(template: TimelineTemplate) -> TimelineTemplateResponse:
    return TimelineTemplateResponse(
        sessionType=template.session_type,
        templateName=template.template_name,
        tasks=template.tasks,
        updatedAt=template.updated_at,
    )


class TemplateStore:
    """Holds one canonical ordered task list per session type"""

    def __init__(self, db: Session, cache: Cache, ttl: int = TEMPLATE_CACHE_TTL):
        self.db = db
        self.cache = cache
        self.ttl = ttl
        self.repo = TimelineRepository()

    def get_template(self, session_type: str) -> Optional[TimelineTemplateResponse]:
        session_type = clean_label(session_type)
        key = build_template_key(session_type)
        cached = self.cache.get(key)
        if cached is not None:
            return TimelineTemplateResponse.model_validate(cached)

        template = self.repo.get_template(self.db, session_type)
        if not template:
            return None

        result = _to_response(template)
        self.cache.set(key, result.model_dump(mode="json"), self.ttl)
        return result

    def require_template(self, session_type: str) -> TimelineTemplateResponse:
        template = self.get_template(session_type)
        if template is None:
            raise NoTemplateError(session_type)
        return template

    def list_templates(self) -> list[TimelineTemplateResponse]:
        return [_to_response(t) for t in self.repo.list_templates(self.db)]

    def put_template(
        self, template: Union[TimelineTemplateIn, dict[str, Any]]
    ) -> TimelineTemplateResponse:
        """Validate and store a template, replacing any existing one for its session type"""
        try:
            if isinstance(template, TimelineTemplateIn):
                # Re-validate in case the model was built without validation
                data = TimelineTemplateIn.model_validate(template.model_dump())
            else:
                data = TimelineTemplateIn.model_validate(template)
        except ValidationError as e:
            message = _format_validation_error(e)
            logger.warning(f"⚠️ Rejected timeline template: {message}")
            raise InvalidTemplateError(f"Invalid timeline template: {message}") from e

        tasks = [task.model_dump() for task in data.tasks]
        stored = self.repo.upsert_template(self.db, data.sessionType, data.templateName, tasks)
        invalidate_template_cache(self.cache, data.sessionType)

        logger.info(f"📝 Stored timeline template '{data.sessionType}' with {len(tasks)} tasks")
        return _to_response(stored)

    def delete_template(self, session_type: str) -> None:
        session_type = clean_label(session_type)
        template = self.repo.get_template(self.db, session_type)
        if not template:
            raise NoTemplateError(session_type)

        self.repo.delete_template(self.db, template)
        invalidate_template_cache(self.cache, session_type)
        logger.info(f"🗑️ Deleted timeline template '{session_type}'")
