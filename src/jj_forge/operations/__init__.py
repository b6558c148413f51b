"""Stack pipelines (upload, submit) and the review flow."""

from jj_forge.operations.review import OpenParams, is_uploaded, open_review
from jj_forge.operations.submit import remote_bookmark, submit, validate_stack
from jj_forge.operations.upload import mutable_parent_id, parent_revset, upload

__all__ = [
    "OpenParams",
    "is_uploaded",
    "mutable_parent_id",
    "open_review",
    "parent_revset",
    "remote_bookmark",
    "submit",
    "upload",
    "validate_stack",
]
