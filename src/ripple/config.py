"""Ripple configuration.

ObserverConfig is the construction-time configuration, frozen after creation.
"""

from dataclasses import dataclass

from ripple._errors import ConfigError


@dataclass(frozen=True, slots=True)
class ObserverConfig:
    """Configuration for a CollectionObserver.

    Attributes:
        debounce_ms: Quiet period before a flush. ``0`` selects the
            priming-aware policy: the initial synchronous burst is coalesced,
            every later change is emitted on its own.
        fetch_only: Enumerate the source once instead of observing it,
            even when it can push changes.
        verbose: Print a one-line summary to stderr for every emitted batch.

    """

    debounce_ms: int = 50
    fetch_only: bool = False
    verbose: bool = False

    def __post_init__(self) -> None:
        # bool is an int subclass; True is not a delay.
        if isinstance(self.debounce_ms, bool) or not isinstance(self.debounce_ms, int):
            msg = f"debounce_ms must be an int, got {type(self.debounce_ms).__name__}"
            raise ConfigError(msg)
        if self.debounce_ms < 0:
            msg = f"debounce_ms must be non-negative, got {self.debounce_ms}"
            raise ConfigError(msg)

    @property
    def priming(self) -> bool:
        """Whether the zero-delay priming-aware policy is selected."""
        return self.debounce_ms == 0
