"""Practice modes — blind practice, speed drill, mistake review and walkthrough.

``QtScheduler`` lives in :mod:`repertoire.practice.qt_bridge` and is not
imported here, so headless use does not need a Qt platform plugin.
"""

from repertoire.practice.clock import Stopwatch
from repertoire.practice.drill import DrillEvents, DrillStats, SpeedDrill
from repertoire.practice.feedback import (
    IFeedbackSink,
    NullFeedback,
    RecordingFeedback,
    classify_move,
)
from repertoire.practice.review import (
    MistakeReviewSession,
    ReviewEvents,
    ReviewTarget,
    resolve_mistake,
)
from repertoire.practice.runner import LineRunner, RunnerEvents
from repertoire.practice.scheduler import IScheduler, ManualScheduler, ScheduledCall
from repertoire.practice.session import PracticeEvents, PracticeSession, ProgressInfo
from repertoire.practice.walkthrough import StudySession

__all__ = [
    # Scheduling
    "IScheduler",
    "ManualScheduler",
    "ScheduledCall",
    "Stopwatch",
    # Feedback
    "IFeedbackSink",
    "NullFeedback",
    "RecordingFeedback",
    "classify_move",
    # Sessions
    "LineRunner",
    "RunnerEvents",
    "PracticeEvents",
    "PracticeSession",
    "ProgressInfo",
    "DrillEvents",
    "DrillStats",
    "SpeedDrill",
    "MistakeReviewSession",
    "ReviewEvents",
    "ReviewTarget",
    "resolve_mistake",
    "StudySession",
]
