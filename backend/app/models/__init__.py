from app.models.project import Project, ProjectStatus
from app.models.task import Task, TaskType, TaskStatus
from app.models.dependency import Dependency, DependencyType
from app.models.time_log import TimeLog
from app.models.baseline import Baseline, BaselineTask
from app.models.change_log import ChangeLog

__all__ = [
    "Project",
    "ProjectStatus",
    "Task",
    "TaskType",
    "TaskStatus",
    "Dependency",
    "DependencyType",
    "TimeLog",
    "Baseline",
    "BaselineTask",
    "ChangeLog",
]
