import os
import logging
from dataclasses import dataclass, field
from typing import List

from fsutils.helpers import (
    is_real_directory,
    list_matching,
    remove_directory,
    remove_file,
    strip_trailing_separators,
)

logger = logging.getLogger(__name__)


@dataclass
class DeletionResult:
    """Outcome of delete_recursive(). Truthy only if everything went."""
    removed: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    unlisted: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed and not self.unlisted

    def __bool__(self):
        return self.ok


def delete_recursive(path: str) -> DeletionResult:
    """
    Delete path and, if it is a real directory, everything below it.

    Children go before their parent. A failure never stops the walk:
    siblings are still tried and the parent directory removal is still
    attempted. Symlinks are removed as links and never followed, also when
    path itself is one given with a trailing separator.

    Args:
        path (str): File or directory to delete

    Returns:
        DeletionResult: What was removed and what was not
    """
    path = strip_trailing_separators(path)
    result = DeletionResult()
    # (path, children_done)
    stack = [(path, False)]

    while stack:
        current, children_done = stack.pop()

        if children_done:
            if remove_directory(current):
                result.removed.append(current)
            else:
                result.failed.append(current)
            continue

        if not is_real_directory(current):
            if remove_file(current):
                result.removed.append(current)
            else:
                result.failed.append(current)
            continue

        stack.append((current, True))
        children = list_matching(os.path.join(current, '*'),
                                 include_files=True, include_dirs=True, silent_on_error=True)
        if children is None:
            result.unlisted.append(current)
            continue
        stack.extend((child, False) for child in reversed(children))

    if not result:
        logger.debug(f"Deleting {path}: {len(result.removed)} removed, "
                     f"{len(result.failed)} failed, {len(result.unlisted)} unlisted")
    return result
