import logging
from typing import Optional

from ruckplan.schemas.profile import UserFitnessProfile
from ruckplan.schemas.program import ProgramSchema
from ruckplan.services.errors import EngineErrorKind, describe_error
from ruckplan.services.stores import ProfileStore

logger = logging.getLogger(__name__)


class FitnessProfileStore:
    """Process-wide cache of the user's fitness profile.

    Updates are computed on a copy; the cached profile is only replaced after
    the backing store accepted the write.
    """

    def __init__(self, backend: ProfileStore, user_id: str):
        self.backend = backend
        self.user_id = user_id
        self._profile: Optional[UserFitnessProfile] = None

    @property
    def profile(self) -> Optional[UserFitnessProfile]:
        return self._profile

    def load(self) -> Optional[UserFitnessProfile]:
        """Load the stored profile, leaving None when nothing is stored yet."""
        self._profile = self.backend.load_profile(self.user_id)
        return self._profile

    def require(self) -> UserFitnessProfile:
        """Current profile, or a default one when none exists yet."""
        if self._profile is None:
            message = describe_error(EngineErrorKind.PROFILE_NOT_FOUND)
            logger.warning(f"{message} for user {self.user_id}; using default profile")
            return UserFitnessProfile.default_profile()
        return self._profile

    def save(self, profile: UserFitnessProfile) -> UserFitnessProfile:
        self.backend.save_profile(self.user_id, profile)
        self._profile = profile
        return profile

    def after_enrollment(self, program: ProgramSchema) -> UserFitnessProfile:
        """Profile as it should look once the user enrolled in `program`."""
        profile = self.require().model_copy(deep=True)

        if program.difficulty > profile.current_level:
            profile.aspirational_level = program.difficulty
        profile.enrollment_history.append(program.id)

        return profile

    def after_completion(self, program: ProgramSchema) -> UserFitnessProfile:
        """Profile as it should look once the user completed `program`."""
        profile = self.require().model_copy(deep=True)

        if program.difficulty >= profile.current_level:
            profile.current_level = program.difficulty
        profile.completed_programs.append(program.id)
        if program.category not in profile.completed_categories:
            profile.completed_categories.append(program.category)

        return profile
