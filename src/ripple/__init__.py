"""Ripple: batched, index-based change notifications for live collections.

Mirrors an ordered, reactive collection into a stream of ``ChangeBatch``
values. Bursts of changes are coalesced, and every emission runs through an
injected host scheduler so the host can tell when things have settled.

Quick start::

    from ripple import CollectionObserver, LiveList, ManualScheduler

    items = LiveList(["a", "b"])
    host = ManualScheduler()
    observer = CollectionObserver(items, scheduler=host, debounce_ms=0)
    observer.subscribe(print)    # engages the source
    host.flush()                 # one batch: add 'a' at 0, add 'b' at 1
    items.remove_at(1)           # one batch, at once: remove at 1
    observer.destroy()

Two debounce policies::

    CollectionObserver(src, scheduler=host)                 # 50 ms trailing
    CollectionObserver(src, scheduler=host, debounce_ms=0)  # priming-aware

"""

__version__ = "0.1.0"
__all__ = [
    "AddChange",
    "AsyncioScheduler",
    "CollectionObserver",
    "ConfigError",
    "Emitter",
    "InvalidSourceError",
    "LiveList",
    "ManualScheduler",
    "MoveChange",
    "ObserverConfig",
    "ObserverDestroyedError",
    "RemoveChange",
    "RippleError",
    "UpdateChange",
    "__version__",
    "apply_changes",
    "load_config",
]

_LAZY = {
    "AddChange": "ripple.changes",
    "MoveChange": "ripple.changes",
    "RemoveChange": "ripple.changes",
    "UpdateChange": "ripple.changes",
    "apply_changes": "ripple.changes",
    "AsyncioScheduler": "ripple.scheduler",
    "ManualScheduler": "ripple.scheduler",
    "CollectionObserver": "ripple.observer",
    "Emitter": "ripple.emitter",
    "LiveList": "ripple.live_list",
    "ObserverConfig": "ripple.config",
    "load_config": "ripple.config_loader",
    "ConfigError": "ripple._errors",
    "InvalidSourceError": "ripple._errors",
    "ObserverDestroyedError": "ripple._errors",
    "RippleError": "ripple._errors",
}


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import ripple`` fast while providing a clean top-level API.
    """
    module_name = _LAZY.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    return getattr(importlib.import_module(module_name), name)
