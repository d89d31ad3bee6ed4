"""Plan execution through the injected copy primitive."""

import logging
from typing import Callable, List, Optional

from .cancellation import CancelToken
from .errors import ConfigurationError
from .filesystem import FileSystem
from .models import CopyItem, CopyPlan
from .utils import log_duration

logger = logging.getLogger(__name__)

CopyProgressCallback = Callable[[int, int, str], None]


class CopyExecutor:
    """Copies the items of a CopyPlan in plan order."""

    def __init__(self, filesystem: Optional[FileSystem],
                 on_progress: Optional[CopyProgressCallback] = None):
        self.filesystem = filesystem
        self.on_progress = on_progress

    def execute(self, plan: CopyPlan, include_overrides: bool = False,
                cancel_token: Optional[CancelToken] = None) -> int:
        """
        Copy every plan item that is not excluded.

        Args:
            plan: Plan produced by the planner
            include_overrides: Overwrite existing targets listed in plan.override_items
            cancel_token: Checked before every copy

        Returns:
            Number of files copied

        The first copy failure propagates unchanged. Files copied before it
        stay in place.
        """
        if self.filesystem is None:
            raise ConfigurationError("executor requires a filesystem", op="copy")

        excluded_targets = set()
        if not include_overrides:
            excluded_targets = {item.target_path for item in plan.override_items}

        to_copy: List[CopyItem] = [
            item for item in plan.items if item.target_path not in excluded_targets
        ]
        total = len(to_copy)
        logger.debug(f"Copying {total} of {len(plan.items)} items")

        with log_duration("Copying files", logger):
            for index, item in enumerate(to_copy):
                if cancel_token is not None:
                    cancel_token.raise_if_cancelled(op="copy", path=str(item.record.source_path))

                if self.on_progress:
                    self.on_progress(index, total, item.name)

                self.filesystem.copy_file(item.record.source_path, item.target_path)

        if self.on_progress:
            self.on_progress(total, total, "")

        logger.info(f"Copied {total} files")
        return total
