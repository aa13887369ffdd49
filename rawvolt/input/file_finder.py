# This module detects and discovers .raw recordings.

"""Find ``.raw`` files and check that they can be read.

Recorders split long observations into numbered files
(``<stem>.0000.raw``, ``<stem>.0001.raw``, ...). :func:`find_raw_files`
returns them in recording order.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {'.raw'}


def detect_file_type(file_path: Path) -> str:
    """Detect the file type from its suffix.

    Raises ``ValueError`` when the extension is unsupported.
    """
    file_path = Path(file_path)
    suffix = file_path.suffix.lower()

    if suffix == ".raw":
        return "raw"
    raise ValueError(
        f"Unsupported file type: {file_path}\n"
        f"Detected extension: {suffix}\n"
        f"Supported extensions: {', '.join(sorted(SUPPORTED_EXTENSIONS))}"
    )


def validate_file_compatibility(file_path: Path) -> Dict[str, Any]:
    """Check whether a file looks like a readable ``.raw`` recording."""
    file_path = Path(file_path)
    validation_result = {
        'is_compatible': False,
        'file_type': None,
        'extension': file_path.suffix.lower(),
        'size_bytes': 0,
        'validation_errors': []
    }

    if not file_path.exists():
        validation_result['validation_errors'].append(f"File not found: {file_path}")
        return validation_result

    if not file_path.is_file():
        validation_result['validation_errors'].append(f"Path is not a file: {file_path}")
        return validation_result

    try:
        validation_result['file_type'] = detect_file_type(file_path)
    except ValueError as e:
        validation_result['validation_errors'].append(str(e))
        return validation_result

    try:
        size_bytes = file_path.stat().st_size
    except OSError as e:
        validation_result['validation_errors'].append(f"Error accessing file: {e}")
        return validation_result

    validation_result['size_bytes'] = size_bytes
    if size_bytes == 0:
        validation_result['validation_errors'].append("Empty file (0 bytes)")
        return validation_result

    validation_result['is_compatible'] = True
    return validation_result


def find_raw_files(directory: Path, stem: Optional[str] = None) -> List[Path]:
    """
    List the ``.raw`` files in ``directory``, optionally restricted to one recording.

    Args:
        directory: Directory to search
        stem: Only keep files whose name starts with this prefix

    Returns:
        Compatible files sorted by name, which is recording order for
        sequence-numbered files

    Raises:
        ValueError: If ``directory`` does not exist or is not a directory
    """
    directory = Path(directory)
    if not directory.exists():
        raise ValueError(f"Data directory does not exist: {directory}")
    if not directory.is_dir():
        raise ValueError(f"Path is not a directory: {directory}")

    candidates = [p for p in directory.iterdir() if p.suffix.lower() in SUPPORTED_EXTENSIONS]
    if stem is not None:
        candidates = [p for p in candidates if p.name.startswith(stem)]

    matching_files = []
    for path in sorted(candidates, key=lambda p: p.name):
        validation = validate_file_compatibility(path)
        if validation['is_compatible']:
            matching_files.append(path)
        else:
            logger.warning("Skipping %s: %s", path.name, "; ".join(validation['validation_errors']))

    logger.info("Found %d .raw file(s) in %s", len(matching_files), directory)
    return matching_files
