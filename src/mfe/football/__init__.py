from .lifecycle import MatchLifecycleController
from .power import TeamPower, TeamPowerCalculator, team_power
from .rewards import RewardDistributor, RewardSubmissionError, compute_awards
from .segment import SegmentEventSimulator, WORDS_PER_SEGMENT, shot_success_rate
from .validation import RosterValidator, parse_tactic

__all__ = [
    "MatchLifecycleController",
    "RewardDistributor",
    "RewardSubmissionError",
    "RosterValidator",
    "SegmentEventSimulator",
    "TeamPower",
    "TeamPowerCalculator",
    "WORDS_PER_SEGMENT",
    "compute_awards",
    "parse_tactic",
    "shot_success_rate",
    "team_power",
]
