"""minstore - minimal in-process observable state container."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("minstore")
except PackageNotFoundError:
    __version__ = "0+local"
from minstore.config import StoreConfig
from minstore.exceptions import (
    StateMergeError,
    StoreConfigError,
    StoreError,
    StoreRecursionError,
)
from minstore.selectors import SelectorSubscription, same_value, shallow_equal, subscribe_with_selector
from minstore.store import Store, create
from minstore.updates import ComputedUpdate, LiteralUpdate, merge_state

__all__ = [
    "__version__",
    "ComputedUpdate",
    "LiteralUpdate",
    "SelectorSubscription",
    "StateMergeError",
    "Store",
    "StoreConfig",
    "StoreConfigError",
    "StoreError",
    "StoreRecursionError",
    "create",
    "merge_state",
    "same_value",
    "shallow_equal",
    "subscribe_with_selector",
]
