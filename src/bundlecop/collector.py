"""Find build artifacts and measure their sizes."""

import fnmatch
import glob
import gzip
import os
import re
from typing import Iterable, Iterator, List, Optional

from .hashparse import remove_base_folder, remove_file_name_hash
from .models import FileReading, FileSpec


class FileResolveError(Exception):
    """Raised when the given file expressions do not resolve to any files."""


# Only applied if neither include nor exclude pattern is given, so that the
# defaults are easy to override.
DEFAULT_INCLUDE_PATTERN = ".js .jsx .js.map .ts .tsx .css .json .jpg .jpeg .gif .png"

# Same level the usual gzip-size tooling measures with
GZIP_COMPRESS_LEVEL = 9

# Innermost `{a,b}` alternation, fnmatch has no brace expansion of its own
_BRACE_GROUP = re.compile(r"\{([^{}]*,[^{}]*)\}")


def parse_include_pattern(pattern: Optional[str]) -> List[str]:
    """Turn a user given pattern into a list of glob patterns.

    Rather than a true glob pattern, users may also give a list of file
    extensions, e.g. ``".js .css"`` or ``".js,.css"``.

    Args:
        pattern (str, optional): Glob pattern or extension list.

    Returns:
        List[str]: Glob patterns, empty if no pattern was given.
    """
    if not pattern:
        return []

    if glob.has_magic(pattern) or _BRACE_GROUP.search(pattern):
        return expand_braces(pattern)

    extensions = [part for part in re.split(r"[,; ]", pattern) if part]
    return [f"*{extension}" for extension in extensions]


def expand_braces(pattern: str) -> List[str]:
    """Expand `{a,b}` alternations, e.g. ``"*.{js,css}"`` to ``["*.js", "*.css"]``."""
    match = _BRACE_GROUP.search(pattern)
    if not match:
        return [pattern]

    head, tail = pattern[:match.start()], pattern[match.end():]
    expanded: List[str] = []
    for option in match.group(1).split(","):
        for candidate in expand_braces(head + option + tail):
            if candidate not in expanded:
                expanded.append(candidate)
    return expanded


def matches_any(file_name: str, patterns: List[str]) -> bool:
    """Check a file against glob patterns.

    Patterns without a slash are matched against the basename only.
    """
    basename = os.path.basename(file_name)
    for pattern in patterns:
        target = file_name if "/" in pattern else basename
        if fnmatch.fnmatch(target, pattern):
            return True
    return False


def find_files_in_directory(directory: str, include: List[str], exclude: List[str]) -> Iterator[FileSpec]:
    """Recursively find all matching files in a directory.

    Raises:
        FileResolveError: If no file matches.
    """
    if not include and not exclude:
        include = parse_include_pattern(DEFAULT_INCLUDE_PATTERN)

    file_names = []
    for dirpath, dirnames, filenames in os.walk(directory):
        dirnames.sort()
        for filename in sorted(filenames):
            file_names.append(os.path.join(dirpath, filename))

    file_names = [
        file_name for file_name in file_names
        if (not include or matches_any(file_name, include))
        and not (exclude and matches_any(file_name, exclude))
    ]

    if not file_names:
        raise FileResolveError(
            f'No files found in directory "{directory}" with include pattern '
            f'"{" ".join(include)}" and exclude pattern "{" ".join(exclude)}".'
        )

    for file_name in file_names:
        yield FileSpec(root=directory, filename=file_name)


def _glob_root(files: List[str]) -> str:
    if len(files) == 1:
        return os.path.dirname(files[0])
    return os.path.commonpath(files)


def resolve_file_expressions(exprs: Iterable[str],
                             include_pattern: Optional[str] = None,
                             exclude_pattern: Optional[str] = None) -> Iterator[FileSpec]:
    """Resolve expressions to files; each may be a file, a directory or a glob.

    Include and exclude patterns are only used for directories. Files found
    by more than one expression are only returned once.

    Raises:
        FileResolveError: If an expression does not resolve to any file.
    """
    found: List[FileSpec] = []
    seen = set()

    def add(spec: FileSpec):
        key = os.path.normpath(spec.filename)
        if key in seen:
            return
        seen.add(key)
        found.append(spec)

    include = parse_include_pattern(include_pattern)
    exclude = parse_include_pattern(exclude_pattern)

    for expr in exprs:
        if glob.has_magic(expr):
            files = sorted(
                f for f in glob.glob(expr, recursive=True) if os.path.isfile(f)
            )
            if not files:
                raise FileResolveError(f'The glob expression "{expr}" does not match any files')

            root = _glob_root(files)
            for file_name in files:
                add(FileSpec(root=root, filename=file_name))

        elif os.path.isdir(expr):
            for spec in find_files_in_directory(expr, include, exclude):
                add(spec)

        elif os.path.lexists(expr):
            # A single file, as given
            add(FileSpec(root="", filename=expr))

        else:
            raise FileResolveError(f"No such file or directory: {expr}")

    for spec in found:
        yield spec


def get_gzip_size(data: bytes) -> int:
    return len(gzip.compress(data, compresslevel=GZIP_COMPRESS_LEVEL))


def measure_file_sizes(file_specs: Iterable[FileSpec]) -> Iterator[FileReading]:
    """Measure every file, and derive its stable name.

    Leading ``./`` and similar are normalized away, then the root folder and
    the filename hash are removed to build the name.
    """
    for spec in file_specs:
        root = os.path.normpath(spec.root) if spec.root else ""
        if root == os.curdir:
            # A "." root is no root; stripping it would cut dotfile names
            root = ""
        filename = os.path.normpath(spec.filename)

        base_name = remove_base_folder(root, filename)
        extracted = remove_file_name_hash(base_name)

        with open(filename, "rb") as f:
            data = f.read()

        yield FileReading(
            filename=filename,
            name=extracted.filename,
            root=root,
            hash=extracted.hash,
            raw_size=os.path.getsize(filename),
            gzip_size=get_gzip_size(data),
        )


def read_files_from_directories(exprs: Iterable[str],
                                include_pattern: Optional[str] = None,
                                exclude_pattern: Optional[str] = None) -> List[FileReading]:
    """Find all files for the given expressions, measure them, return a list."""
    specs = resolve_file_expressions(exprs, include_pattern, exclude_pattern)
    return list(measure_file_sizes(specs))


def measure_file_list(file_specs: Iterable[FileSpec]) -> List[FileReading]:
    """Measure the given files, return a list."""
    return list(measure_file_sizes(file_specs))
