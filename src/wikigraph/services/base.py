"""BaseService — shared foundation for wikigraph services.

Every service receives the store engine and the resolved settings at
construction time. Services own their connection scope: each public
operation checks out one pooled connection and releases it on return.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from wikigraph.config.settings import WikiSettings
from wikigraph.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


class BaseService:
    """Base for service-layer classes.

    Usage::

        class ExploreService(BaseService):
            def explore(self, name: str) -> ServiceResult:
                with open_repository(self._engine) as repo:
                    ...
    """

    def __init__(self, engine: Engine, settings: WikiSettings | None = None) -> None:
        self._engine = engine
        self._settings = settings or WikiSettings()

    @staticmethod
    def _failure(op: str, code: str, message: str, **detail: object) -> ServiceResult:
        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError(code=code, message=message, detail=dict(detail)),
        )
