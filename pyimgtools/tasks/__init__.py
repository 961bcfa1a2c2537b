"""
Tasks run an image processor together with ingest and encoding and measure the time spent in each phase.
"""
__title__ = "Tasks"

from pyimgtools.utils.enums import TaskState
from .task import ImageTask, TaskResult, Timing
