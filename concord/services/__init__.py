"""
Services package.
"""

from .background_tasks_svc import BackgroundTaskService, TaskState
from .coincidence_svc import CoincidenceConfig, CoincidenceService
from .config_svc import ConfigService

__all__ = [
    "BackgroundTaskService",
    "CoincidenceConfig",
    "CoincidenceService",
    "ConfigService",
    "TaskState",
]
