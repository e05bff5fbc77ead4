"""
Storage — where uploaded source files are kept and how they are addressed.
"""

from workspace_rag.storage.base import BlobStorage, build_file_key
from workspace_rag.storage.local import LocalBlobStorage

__all__ = ["BlobStorage", "LocalBlobStorage", "build_file_key"]
