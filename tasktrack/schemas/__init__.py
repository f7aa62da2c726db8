"""
Schemas package.

Import all schemas here for easy access.
"""

from tasktrack.schemas.task import TaskCreate, TaskPatch, TaskRead
from tasktrack.schemas.client_task import ClientTask, ClientTaskPatch, Priority, TaskForm
