from .dsl import In, Out, InOut, job, matrix, wf, JobBuilder, build
from .engine import State, add_job, job_event
from .errors import (
    SymflowError,
    InvalidJobID,
    InvalidEvent,
    MissingDescendent,
    MissingJob,
    DuplicateJob,
    InvalidTransition,
    WorkflowError,
)
from .model import Dependency, DependencyType, Event, JobState
from .runner import JobSpec, drive, load_workflow, plan
from .settings import Settings

__all__ = [
    "In", "Out", "InOut", "job", "matrix", "wf", "JobBuilder", "build",
    "State", "add_job", "job_event",
    "SymflowError", "InvalidJobID", "InvalidEvent", "MissingDescendent", "MissingJob",
    "DuplicateJob", "InvalidTransition", "WorkflowError",
    "Dependency", "DependencyType", "Event", "JobState",
    "JobSpec", "drive", "load_workflow", "plan",
    "Settings",
]
