import atexit
import logging
from typing import Optional

from scratchdir.recursive_delete import DeletionResult, delete_recursive
from scratchdir.temp_manager import TempDirManager
from scratchdir.temp_namer import TempNameGenerator
from settings_manager import SettingsManager

logger = logging.getLogger(__name__)


class TempSession:
    """
    Temp storage of one host application session.

    Holds the temp directory manager and the name generator. The host keeps
    one instance and passes it to whatever needs scratch files. Calls must
    come from one thread at a time.
    """

    def __init__(self, settings: Optional[dict] = None):
        self.settings_manager = SettingsManager()
        if settings:
            self.settings_manager.update_settings(settings)
        self.temp_manager = TempDirManager(self.settings_manager.get_settings())
        self.name_generator = TempNameGenerator(self.temp_manager)
        self._shutdown_registered = False

    def get_temp_dir(self) -> Optional[str]:
        return self.temp_manager.get_temp_dir()

    def delete_temp_dir(self) -> Optional[DeletionResult]:
        return self.temp_manager.delete_temp_dir()

    def next_temp_name(self) -> Optional[str]:
        return self.name_generator.next_temp_name()

    def delete_recursive(self, path: str) -> DeletionResult:
        return delete_recursive(path)

    def register_shutdown(self):
        """Remove the temp directory when the interpreter exits."""
        if self._shutdown_registered:
            return
        atexit.register(self.delete_temp_dir)
        self._shutdown_registered = True
        logger.debug("Registered temp directory removal at exit")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.delete_temp_dir()
