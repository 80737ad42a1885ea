from __future__ import annotations

from profile_scout.config import settings
from profile_scout.errors import ExhaustedRetries, ExtractionFailure
from profile_scout.models.events import ActivityKind, ActivityStatus
from profile_scout.models.schemas import (
    Candidate,
    ExtractedProfile,
    ExtractedProfiles,
    normalize_username,
)
from profile_scout.models.session import FetchedPage
from profile_scout.services import logger as log_service
from profile_scout.services.activity import ActivityEmitter
from profile_scout.services.invoker import ModelRequest, RetryableInvoker
from profile_scout.services.prompt_store import render_prompt


def to_candidate(profile: ExtractedProfile, source_url: str) -> Candidate | None:
    username = normalize_username(profile.username)
    if not username:
        return None
    return Candidate(
        username=username,
        display_name=profile.name.strip(),
        bio=profile.bio.strip(),
        follower_count=max(profile.followers, 0),
        following_count=max(profile.following or 0, 0),
        post_count=max(profile.posts or 0, 0),
        engagement_rate=profile.engagement_rate or 0.0,
        category=profile.category.strip(),
        verified=profile.verified,
        location=(profile.location or "").strip() or None,
        source_url=source_url,
    )


class Extractor:
    """Asks the model for the profiles a single fetched page mentions."""

    name = "extract"

    def __init__(
        self,
        invoker: RetryableInvoker,
        emitter: ActivityEmitter,
        *,
        platform: str | None = None,
    ):
        self.invoker = invoker
        self.emitter = emitter
        self.platform = platform or settings.target_platform

    async def extract(self, page: FetchedPage, original_query: str) -> list[Candidate]:
        self.emitter.add(
            ActivityKind.EXTRACT,
            ActivityStatus.PENDING,
            f"Extracting {self.platform} accounts from {page.url}",
        )
        request = ModelRequest(
            prompt=render_prompt(
                "extractor.user",
                platform=self.platform,
                query=original_query,
                url=page.url,
                title=page.title,
                content=page.content,
            ),
            system=render_prompt("extractor.system", platform=self.platform),
            schema=ExtractedProfiles,
            activity_kind=ActivityKind.EXTRACT,
            caller="extractor.extract",
        )
        try:
            extracted: ExtractedProfiles = await self.invoker.invoke(request)
        except ExhaustedRetries as e:
            failure = ExtractionFailure(e, subject=page.url)
            log_service.log_event(
                event_type="extraction_failed",
                message=failure.describe(),
                session_id=self.invoker.session.session_id,
                url=page.url,
            )
            self.emitter.add(ActivityKind.EXTRACT, ActivityStatus.ERROR, failure.describe())
            return []

        candidates = [
            candidate
            for candidate in (to_candidate(p, page.url) for p in extracted.accounts)
            if candidate is not None
        ]
        self.emitter.add(
            ActivityKind.EXTRACT,
            ActivityStatus.COMPLETE,
            f"Extracted {len(candidates)} accounts from {page.url}",
        )
        return candidates
