"""bundlecop: track the sizes of your build artifacts across commits."""

from .hashparse import ExtractionResult, remove_base_folder, remove_file_name_hash
from .version import __version__

__all__ = [
    "ExtractionResult",
    "remove_base_folder",
    "remove_file_name_hash",
    "__version__",
]
