import os
import logging
from typing import NamedTuple, Optional

from fsutils.helpers import (
    expand_variables,
    is_directory,
    make_unique_directory,
    resolve_full_path,
    remove_directory,
    strip_trailing_separators,
    unique_name_length,
)
from scratchdir.recursive_delete import DeletionResult, delete_recursive
from settings_manager import SettingsManager

logger = logging.getLogger(__name__)


class CandidateResult(NamedTuple):
    template: str
    path: Optional[str] = None
    reason: Optional[str] = None


class TempDirManager:
    """
    Owns the private temp directory of one host session.

    The directory is created on the first call to get_temp_dir() in the
    first usable candidate base directory, and removed with everything in
    it by delete_temp_dir(). Once set, the cached path never changes.

    Not thread safe: callers driving it from several threads must
    serialise access themselves.
    """

    def __init__(self, settings: Optional[dict] = None):
        settings_manager = SettingsManager()
        if settings:
            settings_manager.update_settings(settings)
        self.settings = dict(settings_manager.get_settings())
        self.candidate_dirs = tuple(self.settings['candidate_dirs'])
        self.temp_dir: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.temp_dir is not None

    def get_temp_dir(self) -> Optional[str]:
        """
        Get the temp directory, creating it on first use.

        Returns:
            str: Absolute path ending with a separator, or None if no
            candidate base directory could host it
        """
        if self.temp_dir is None:
            self._make_temp_dir()
        return self.temp_dir

    def _make_temp_dir(self):
        for template in self.candidate_dirs:
            result = self._try_candidate(template)
            if result.path:
                self.temp_dir = result.path
                logger.info(f"Created temp directory {self.temp_dir}")
                return
            logger.debug(f"Skipping temp candidate {template!r}: {result.reason}")
        logger.warning("No usable temp directory in any of: " + ", ".join(map(repr, self.candidate_dirs)))

    def _try_candidate(self, template: str) -> CandidateResult:
        dir_template = self.settings['dir_template']
        # base + sep + unique name + sep + generated file name
        reserved = len(os.sep) + unique_name_length(dir_template) + len(os.sep) + self.settings['name_reserve']
        max_len = self.settings['max_path_length'] - reserved

        base = expand_variables(template, max_len)
        if not base:
            return CandidateResult(template, reason="expansion empty or too long")
        if base.startswith('$'):
            return CandidateResult(template, reason="undefined variable")
        if not is_directory(base):
            return CandidateResult(template, reason=f"{base} is not a directory")

        if not base.endswith(os.sep):
            base += os.sep
        created = make_unique_directory(base + dir_template)
        if created is None:
            return CandidateResult(template, reason=f"could not create a directory in {base}")

        full_path = resolve_full_path(created)
        if full_path is None:
            remove_directory(created)
            return CandidateResult(template, reason=f"could not resolve {created}")
        if not full_path.endswith(os.sep):
            full_path += os.sep
        return CandidateResult(template, path=full_path)

    def delete_temp_dir(self) -> Optional[DeletionResult]:
        """Remove the temp directory and everything in it. Safe to call twice."""
        if self.temp_dir is None:
            return None

        path = strip_trailing_separators(self.temp_dir)
        result = delete_recursive(path)
        self.temp_dir = None
        if result:
            logger.info(f"Removed temp directory {path}")
        else:
            logger.warning(f"Temp directory {path} only partly removed: {len(result.failed)} entries left, "
                           f"{len(result.unlisted)} directories could not be listed")
        return result

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.delete_temp_dir()
