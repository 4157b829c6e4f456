from .config import NotebookConfig, load_config
from .session import TreeSession
from .store import NotebookStore, RecordNotFound
from .views import CurrentNodeView, ForkEntry, JumpTarget, current_node_view

__all__ = [
    "CurrentNodeView",
    "ForkEntry",
    "JumpTarget",
    "NotebookConfig",
    "NotebookStore",
    "RecordNotFound",
    "TreeSession",
    "current_node_view",
    "load_config",
]
