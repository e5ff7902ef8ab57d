"""Store configuration for minstore."""

from __future__ import annotations

import dataclasses

from minstore.exceptions import StoreConfigError

DEFAULT_SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "passwd",
        "secret",
        "token",
        "accesstoken",
        "refreshtoken",
        "apikey",
        "api_key",
        "authorization",
        "cookie",
    }
)


@dataclasses.dataclass(frozen=True)
class StoreConfig:
    """Store configuration.

    Parameters
    ----------
    name : str
        Label used in log records and ``repr``.
    log_state : bool
        Include the (redacted) committed state in DEBUG commit records.
        Off by default; only changed keys are logged otherwise.
    sensitive_keys : frozenset[str]
        Lower-cased keys whose values are masked when state is logged.
    max_log_string : int
        Strings longer than this are truncated when state is logged.
    max_notify_depth : int or None
        Maximum number of notification passes active at once; a listener
        calling ``set_state`` opens a nested pass. ``1`` forbids nesting,
        ``None`` leaves nesting unbounded.
    """

    name: str = "store"
    log_state: bool = False
    sensitive_keys: frozenset[str] = DEFAULT_SENSITIVE_KEYS
    max_log_string: int = 512
    max_notify_depth: int | None = None

    def __post_init__(self) -> None:
        if self.max_notify_depth is not None and self.max_notify_depth < 1:
            raise StoreConfigError(f"max_notify_depth must be >= 1, got {self.max_notify_depth}")
        if self.max_log_string < 1:
            raise StoreConfigError(f"max_log_string must be >= 1, got {self.max_log_string}")
        # Accept any iterable of keys but always store a normalized frozenset.
        object.__setattr__(
            self,
            "sensitive_keys",
            frozenset(str(key).lower() for key in self.sensitive_keys),
        )
