import logging
from typing import Optional

logger = logging.getLogger(__name__)

COUNTER_MODULUS = 2 ** 32


class TempNameGenerator:
    def __init__(self, temp_manager):
        """Hand out file names inside the directory of temp_manager."""
        self.temp_manager = temp_manager
        self.counter = 0

    def next_temp_name(self) -> Optional[str]:
        """
        Get a new unique name for a temp file. The file is not created.

        No existence check is made: nothing but this process writes into
        the managed directory.

        Returns:
            str: Full path of the name, or None if there is no temp directory
        """
        temp_dir = self.temp_manager.get_temp_dir()
        if not temp_dir:
            logger.error("No temp directory available for a temp file name")
            return None

        name = f"{temp_dir}{self.counter}"
        self.counter = (self.counter + 1) % COUNTER_MODULUS
        return name
