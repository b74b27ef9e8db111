"""Remove content hashes from build artifact filenames.

Bundlers embed a hash into filenames (``app.a43ff0.js``) so that browsers
refetch changed files. To know which file is which between two builds, we
strip that hash again and use the remaining name as the file's identity.

Doing this automatically is a heuristic: we try to be smart without trying
too hard.
"""

import os
import re
from dataclasses import dataclass
from typing import List


SEPARATOR_CHARACTERS = "._:-"

# Capturing group keeps the words in the split result, the separators end up
# between them.
_SEGMENT_SPLIT = re.compile(r"([^._:\-]+)")
_HEX_WORD = re.compile(r"[0-9a-fA-F]+")

MIN_HASH_LENGTH = 5


@dataclass(frozen=True)
class ExtractionResult:
    """A filename with its hash removed, and the hash that was removed."""
    filename: str
    hash: str = ""


def remove_base_folder(base_folder: str, full_file_name: str) -> str:
    """Make ``full_file_name`` relative to ``base_folder``.

    Both paths are expected to be normalized already. If ``base_folder`` is
    not a prefix of ``full_file_name``, the name is returned unchanged.
    """
    if not full_file_name.startswith(base_folder):
        return full_file_name

    relative = full_file_name[len(base_folder):]
    if relative and relative[0] in _path_separators():
        relative = relative[1:]
    return relative


def remove_file_name_hash(file_name: str) -> ExtractionResult:
    """Remove a hash-like token from the basename of ``file_name``.

    Returns:
        ExtractionResult: The new filename (directory untouched) and the
            removed hash, or the unchanged filename and an empty hash.
    """
    directory, basename = os.path.split(file_name)
    parts = split_segments(basename)

    # We need at least a base, a hash and an extension.
    if count_non_separator_elements(parts) < 3:
        return ExtractionResult(file_name, "")

    hash_indices = identify_potential_hashes(parts)
    if not hash_indices:
        return ExtractionResult(file_name, "")

    if len(hash_indices) == 1:
        index = hash_indices[0]
    else:
        # Prefer the last candidate, unless it is the final part, in which
        # case it is more likely an extension.
        index = hash_indices[-1]
        if index == len(parts) - 1:
            index = hash_indices[-2]

    return _rebuild_without_index(parts, index, directory)


def split_segments(basename: str) -> List[str]:
    """Split a basename into alternating word and separator segments."""
    return [part for part in _SEGMENT_SPLIT.split(basename) if part]


def is_separator(part: str) -> bool:
    """True if the segment consists of separator characters only."""
    return all(character in SEPARATOR_CHARACTERS for character in part)


def count_non_separator_elements(parts: List[str]) -> int:
    """Number of word segments in a split basename."""
    return sum(1 for part in parts if not is_separator(part))


def identify_potential_hashes(parts: List[str]) -> List[int]:
    """Indices of all parts that could be a hash.

    A hash is at least five characters long and hexadecimal.
    """
    return [
        index for index, part in enumerate(parts)
        if len(part) >= MIN_HASH_LENGTH and _HEX_WORD.fullmatch(part)
    ]


def _rebuild_without_index(parts: List[str], index_to_remove: int, directory: str) -> ExtractionResult:
    hash_value = parts[index_to_remove]
    remaining = parts[:index_to_remove] + parts[index_to_remove + 1:]

    # One of the separators around the hash is now redundant. If the hash
    # was at the start, that is the one now in front, otherwise the one
    # before it.
    separator_index = 0 if index_to_remove == 0 else index_to_remove - 1
    separator = remaining[separator_index]
    if len(separator) == 1:
        remaining = remaining[:separator_index] + remaining[separator_index + 1:]
    else:
        remaining[separator_index] = separator[:-1]

    new_basename = "".join(remaining)
    if directory:
        return ExtractionResult(os.path.join(directory, new_basename), hash_value)
    return ExtractionResult(new_basename, hash_value)


def _path_separators() -> str:
    return os.sep + (os.altsep or "")
