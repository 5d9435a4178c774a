from datetime import datetime
from typing import List, Optional

from ruckplan.schemas.session import AdaptationType, CompletedWorkout, ProgramAdaptation


class AdaptationAnalyzer:
    """Suggest program adjustments from a completed workout"""

    # Thresholds for adaptation triggers, relative to target duration
    FAST_COMPLETION_THRESHOLD = 0.80  # 20% under target
    SLOW_COMPLETION_THRESHOLD = 1.30  # 30% over target
    WEIGHT_STEP_LBS = 2.5

    def analyze(
        self,
        workout: CompletedWorkout,
        target_duration_seconds: Optional[float] = None,
        now: Optional[datetime] = None
    ) -> List[ProgramAdaptation]:
        """
        Compare actual duration against target

        Rules:
        - Actual < 80% of target: suggest increasing intensity
        - Actual > 130% of target: suggest decreasing intensity
        - No usable target: no suggestion

        Adaptations are advisory only; nothing here touches the schedule.

        Returns:
            List of 0, 1 or 2 ProgramAdaptation entries
        """
        target = target_duration_seconds
        if target is None:
            target = workout.target_duration_seconds
        if target is None or target <= 0:
            return []

        created_at = now or workout.completed_date
        adaptations = []

        if workout.duration_seconds < target * self.FAST_COMPLETION_THRESHOLD:
            adaptations.append(ProgramAdaptation(
                type=AdaptationType.INCREASE_INTENSITY,
                reason="Workout completed significantly faster than target",
                suggested_change=f"Increase weight by {self.WEIGHT_STEP_LBS} lbs next workout",
                confidence=0.8,
                created_at=created_at,
            ))

        if workout.duration_seconds > target * self.SLOW_COMPLETION_THRESHOLD:
            adaptations.append(ProgramAdaptation(
                type=AdaptationType.DECREASE_INTENSITY,
                reason="Workout was significantly slower than target",
                suggested_change=f"Reduce weight by {self.WEIGHT_STEP_LBS} lbs next workout",
                confidence=0.7,
                created_at=created_at,
            ))

        return adaptations
