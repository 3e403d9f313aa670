"""Reconcilers for remote filesystem resources."""

from remotefs.resources.base import ReplacementRequiredError, ResourceError
from remotefs.resources.file import FileResource
from remotefs.resources.folder import FolderResource

__all__ = [
    "FileResource",
    "FolderResource",
    "ReplacementRequiredError",
    "ResourceError",
]
