import logging
from typing import Any, Optional

from sqlalchemy import select

from database.models import AuthorExpertiseProfile
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ExpertiseRepository(BaseRepository):
    def get_profile(self, user_id: Any) -> Optional[AuthorExpertiseProfile]:
        stmt = select(AuthorExpertiseProfile).where(AuthorExpertiseProfile.user_id == user_id)
        return self._one_or_none(stmt)

    def upsert_profile(
        self,
        user_id: Any,
        profile_strength: Optional[float] = None,
        total_answers: Optional[int] = None,
        accepted_answers: Optional[int] = None,
        expert_level: Optional[str] = None
    ) -> AuthorExpertiseProfile:
        """Create or update the profile; None arguments leave fields untouched."""
        profile = self.get_profile(user_id)
        if profile is None:
            profile = AuthorExpertiseProfile(
                user_id=user_id,
                total_answers=0,
                accepted_answers=0,
                expert_level='newcomer',
                profile_strength=0
            )
            self.db.add(profile)

        if profile_strength is not None:
            profile.profile_strength = max(0.0, min(100.0, float(profile_strength)))
        if total_answers is not None:
            profile.total_answers = total_answers
        if accepted_answers is not None:
            profile.accepted_answers = accepted_answers
        if expert_level is not None:
            profile.expert_level = expert_level

        self.db.flush()
        return profile
