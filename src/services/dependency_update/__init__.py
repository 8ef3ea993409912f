from .duplicate_guard import DuplicateGuard
from .update_workflow import UpdateWorkflow, generate_branch_name

__all__ = ["DuplicateGuard", "UpdateWorkflow", "generate_branch_name"]
