"""
Photo Copier

Copies RAW and JPEG photos from a source tree into a target tree, skipping
JPEGs that have a RAW sibling, filtering by capture date and asking before
anything already in the target is overwritten.
"""

__version__ = "1.0.0"

from .cancellation import CancelToken
from .config import Config, RunOptions
from .executor import CopyExecutor
from .filesystem import LocalFileSystem
from .metadata import ExifReader
from .models import CopyItem, CopyPlan, FileKind, FileRecord, classify
from .planner import Planner, build_plan
from .reporter import PlanReporter

__all__ = [
    'CancelToken',
    'Config',
    'CopyExecutor',
    'CopyItem',
    'CopyPlan',
    'ExifReader',
    'FileKind',
    'FileRecord',
    'LocalFileSystem',
    'PlanReporter',
    'Planner',
    'RunOptions',
    'build_plan',
    'classify',
]
