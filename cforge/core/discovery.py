"""
Discovery: list the files of one directory that carry a given extension.

Non-recursive.  Order follows the directory listing (not sorted).
Returns None when the directory is missing and an empty StringArray
when it exists but nothing matches, so callers can tell them apart.
"""
import logging
import os
from typing import Optional

from cforge.core.paths import dir_exists, path_join
from cforge.core.string_array import StringArray

logger = logging.getLogger(__name__)


def discover(directory: str, extension: str) -> Optional[StringArray]:
    """
    Collect ``<directory>/<name>`` for every regular file whose name
    ends with ``.<extension>``.
    """
    if not dir_exists(directory):
        logger.debug("Discovery: directory %s does not exist", directory)
        return None

    suffix = f".{extension}"
    found = StringArray(16)

    try:
        with os.scandir(directory) as it:
            for entry in it:
                if not entry.name.endswith(suffix):
                    continue
                if not entry.is_file():
                    continue
                found.append(path_join(directory, entry.name))
    except OSError as e:
        logger.error("Cannot list directory %s: %s", directory, e)
        return None

    logger.debug("Discovery: %d *%s files in %s", found.count, suffix, directory)
    return found
