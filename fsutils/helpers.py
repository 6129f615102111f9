import os
import stat
import errno
import fnmatch
import logging
import tempfile
from typing import List, Optional

logger = logging.getLogger(__name__)

PLACEHOLDER = 'X'
# Length of the random part tempfile.mkdtemp puts after the prefix
UNIQUE_SUFFIX_LENGTH = 8


def _describe(e: OSError) -> str:
    """Short reason for an OS failure, e.g. 'ENOSPC: No space left on device'."""
    code = errno.errorcode.get(e.errno, '') if e.errno else ''
    reason = e.strerror or str(e)
    return f"{code}: {reason}" if code else reason


def expand_variables(template: str, max_len: Optional[int] = None) -> Optional[str]:
    """
    Expand environment variables and a leading '~' in a path template.

    Undefined variables are left in place, so a result starting with '$'
    means the expansion could not complete.

    Returns:
        str: The expanded path, or None if it would exceed max_len
    """
    expanded = os.path.expanduser(os.path.expandvars(template))
    if max_len is not None and len(expanded) > max_len:
        logger.debug(f"Expansion of {template!r} is too long ({len(expanded)} > {max_len})")
        return None
    return expanded


def strip_trailing_separators(path: str) -> str:
    """Drop trailing separators, keeping a bare root such as '/'."""
    separators = os.sep + (os.altsep or '')
    stripped = path.rstrip(separators)
    if not stripped or (os.name == 'nt' and stripped.endswith(':')):
        return path[:len(stripped) + 1]
    return stripped


def is_real_directory(path: str) -> bool:
    """True for a directory that is not a symlink to one."""
    try:
        return stat.S_ISDIR(os.lstat(strip_trailing_separators(path)).st_mode)
    except (OSError, ValueError):
        return False


def is_directory(path: str) -> bool:
    return os.path.isdir(path)


def unique_name_length(template_name: str) -> int:
    """Length of the name make_unique_directory() creates from template_name."""
    return len(template_name.rstrip(PLACEHOLDER)) + UNIQUE_SUFFIX_LENGTH


def make_unique_directory(template: str) -> Optional[str]:
    """
    Atomically create a new directory named after template.

    The trailing run of placeholder characters is replaced by a random
    suffix of UNIQUE_SUFFIX_LENGTH characters, whatever the run length. The directory is created with mode 0700 in the same call that
    picks the name.

    Args:
        template (str): Path ending in placeholder characters, e.g. '/tmp/scratchXXXXXX'

    Returns:
        str: Path of the created directory, or None on failure
    """
    parent, base = os.path.split(template)
    prefix = base.rstrip(PLACEHOLDER)
    try:
        return tempfile.mkdtemp(prefix=prefix, dir=parent or os.curdir)
    except FileExistsError as e:
        logger.debug(f"Name collisions exhausted for {template}: {_describe(e)}")
    except OSError as e:
        logger.debug(f"Could not create directory from {template}: {_describe(e)}")
    return None


def resolve_full_path(path: str) -> Optional[str]:
    """Return the canonical absolute form of path."""
    try:
        return os.path.realpath(path)
    except (OSError, ValueError) as e:
        logger.debug(f"Could not resolve {path}: {str(e)}")
        return None


def list_matching(path_glob: str, include_files: bool = True, include_dirs: bool = True,
                  silent_on_error: bool = False) -> Optional[List[str]]:
    """
    List the immediate children of a directory matching a wildcard.

    Only the last component of path_glob may contain wildcards. Names
    starting with a dot are matched like any other. A symlink is reported
    as a file even when it points at a directory.

    Returns:
        list: Matching paths sorted by name, or None if the directory could not be read
    """
    directory, pattern = os.path.split(path_glob)
    directory = directory or os.curdir
    entries = []
    try:
        with os.scandir(directory) as it:
            for entry in it:
                if not fnmatch.fnmatchcase(entry.name, pattern):
                    continue
                if entry.is_dir(follow_symlinks=False):
                    if include_dirs:
                        entries.append(entry.path)
                elif include_files:
                    entries.append(entry.path)
    except OSError as e:
        if silent_on_error:
            logger.debug(f"Listing {path_glob} failed: {_describe(e)}")
        else:
            logger.warning(f"Listing {path_glob} failed: {_describe(e)}")
        return None
    return sorted(entries)


def remove_file(path: str) -> bool:
    """Remove a file or a symlink. A link to a directory loses only the link."""
    try:
        if os.name == 'nt' and os.path.islink(path) and os.path.isdir(path):
            os.rmdir(path)
        else:
            os.remove(path)
        return True
    except OSError as e:
        logger.debug(f"Could not remove file {path}: {_describe(e)}")
        return False


def remove_directory(path: str) -> bool:
    try:
        os.rmdir(path)
        return True
    except OSError as e:
        logger.debug(f"Could not remove directory {path}: {_describe(e)}")
        return False
