from app.schemas.project import ProjectCreate, ProjectUpdate, ProjectRead
from app.schemas.task import (
    TaskCreate,
    TaskUpdate,
    TaskMove,
    TaskRead,
    TaskUpdateResult,
    TaskMoveResult,
)
from app.schemas.dependency import DependencyCreate, DependencyRead, DependencyCreateResult
from app.schemas.time_log import TimeLogCreate, TimeLogRead
from app.schemas.baseline import (
    BaselineCreate,
    BaselineRead,
    BaselineDiff,
    BaselineDiffItem,
    BaselineDiffSummary,
)
from app.schemas.change_log import ChangeLogRead

__all__ = [
    "ProjectCreate",
    "ProjectUpdate",
    "ProjectRead",
    "TaskCreate",
    "TaskUpdate",
    "TaskMove",
    "TaskRead",
    "TaskUpdateResult",
    "TaskMoveResult",
    "DependencyCreate",
    "DependencyRead",
    "DependencyCreateResult",
    "TimeLogCreate",
    "TimeLogRead",
    "BaselineCreate",
    "BaselineRead",
    "BaselineDiff",
    "BaselineDiffItem",
    "BaselineDiffSummary",
    "ChangeLogRead",
]
