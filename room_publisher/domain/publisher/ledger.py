"""Publication ledger.

Publishes one track per media kind and records what happened. Session-layer
errors are converted into `PublishOutcome` values here and never reach the
controller's control flow. Unpublishing is best-effort.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from loguru import logger

from room_publisher.schemas import MediaKind
from room_publisher.utils.app_errors import AppError, AppErrorCode


class PublishingSession(Protocol):
    async def publish_track(self, track: Any, options: Any) -> Any: ...

    async def unpublish_track(self, track_sid: str) -> None: ...


@dataclass
class PublishOutcome:
    """Result of one publish attempt: either a publication or an error."""

    kind: MediaKind
    publication: Any = None
    error: AppError | None = None

    @property
    def ok(self) -> bool:
        return self.publication is not None

    @property
    def sid(self) -> str | None:
        return getattr(self.publication, "sid", None) if self.publication is not None else None


class PublicationLedger:
    def __init__(self, session: PublishingSession) -> None:
        self._session = session
        self._outcomes: dict[MediaKind, PublishOutcome] = {}
        self._live: dict[MediaKind, Any] = {}

    async def publish(self, kind: MediaKind, track: Any, options: Any) -> PublishOutcome:
        try:
            publication = await self._session.publish_track(track, options)
        except Exception as exc:
            error = (
                exc
                if isinstance(exc, AppError)
                else AppError(errcode=AppErrorCode.E_PUBLISH_FAILED, errmesg=str(exc))
            )
            logger.warning(
                f"Failed to publish {kind} track: {error.errcode} {error.erresid} "
                f"msg={error.errmesg}"
            )
            outcome = PublishOutcome(kind=kind, error=error)
        else:
            outcome = PublishOutcome(kind=kind, publication=publication)
            self._live[kind] = publication
            logger.info(f"Published {kind} track: sid={outcome.sid}")

        self._outcomes[kind] = outcome
        return outcome

    def outcome(self, kind: MediaKind) -> PublishOutcome | None:
        return self._outcomes.get(kind)

    def is_published(self, kind: MediaKind) -> bool:
        return kind in self._live

    def published_kinds(self) -> list[MediaKind]:
        return list(self._live)

    async def unpublish(self, kind: MediaKind) -> bool:
        """Unpublish the track of `kind`, if one is live.

        Returns:
            True if the session acknowledged the unpublish, False otherwise
        """
        publication = self._live.pop(kind, None)
        if publication is None:
            return False

        try:
            await self._session.unpublish_track(publication.sid)
        except Exception as exc:
            # Already shutting down; the room drops the track on disconnect anyway
            logger.debug(f"Ignoring unpublish failure: kind={kind} error={exc}")
            return False

        logger.info(f"Unpublished {kind} track: sid={publication.sid}")
        return True

    async def unpublish_all(self) -> None:
        for kind in self.published_kinds():
            await self.unpublish(kind)
