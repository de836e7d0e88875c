"""Process-wide singletons that are released together, newest first."""

from __future__ import annotations

import threading
from typing import Any, Callable, TypeVar

_T = TypeVar("_T", bound="Singleton")

_LOCK = threading.RLock()


class SingletonManager:
    """Owns every singleton instance and releases them in reverse creation order."""

    def __init__(self) -> None:
        self._stack: list[Singleton] = []
        self._lock = threading.RLock()

    def _store(self, obj: _T) -> _T:
        with self._lock:
            self._stack.append(obj)
        return obj

    def _clear(self, obj: Singleton) -> None:
        with self._lock:
            kept = [item for item in self._stack if item is not obj]
            removed = len(kept) != len(self._stack)
            self._stack = kept
        if removed:
            _destroy(obj)

    def shutdown(self) -> None:
        """Release every stored singleton, the most recently created first."""
        while True:
            with self._lock:
                if not self._stack:
                    return
                obj = self._stack.pop()
            _destroy(obj)

    def empty(self) -> bool:
        """Return True when no singleton is alive."""
        with self._lock:
            return not self._stack


singleton_manager = SingletonManager()


def _destroy(obj: Singleton) -> None:
    owner = type(obj)._owner()
    with _LOCK:
        if owner._singleton_instance is obj:
            owner._singleton_instance = None
    obj._release()


def _default_constructible(cls: type) -> bool:
    """Return True when ``cls`` can be created without arguments."""
    init = cls.__init__
    if init is object.__init__:
        return True
    code = getattr(init, "__code__", None)
    if code is None:
        return True
    defaults = getattr(init, "__defaults__", None) or ()
    kwdefaults = getattr(init, "__kwdefaults__", None) or {}
    required_positional = code.co_argcount - 1 - len(defaults)
    kwonly = code.co_varnames[code.co_argcount:code.co_argcount + code.co_kwonlyargcount]
    required_keyword = [name for name in kwonly if name not in kwdefaults]
    return required_positional <= 0 and not required_keyword


class Singleton:
    """Base for classes with one shared instance per direct subclass.

    A class that derives from a singleton class shares the storage of that
    class, so ``Base.instance()`` returns a ``Derived`` created earlier.
    """

    _singleton_owner: type[Singleton] | None = None
    _singleton_instance: Singleton | None = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if Singleton in cls.__bases__:
            cls._singleton_owner = cls
            cls._singleton_instance = None

    @classmethod
    def _owner(cls) -> type[Singleton]:
        owner = cls._singleton_owner
        if owner is None:
            raise TypeError("Singleton itself cannot be instantiated; subclass it")
        return owner

    @classmethod
    def instance(cls: type[_T]) -> _T:
        """Return the shared instance, creating it with no arguments if needed."""
        owner = cls._owner()
        with _LOCK:
            if owner._singleton_instance is None:
                if not _default_constructible(cls):
                    raise RuntimeError(
                        f"{cls.__name__} is not default-constructible but was not "
                        "explicitly initialized before access."
                    )
                owner._singleton_instance = singleton_manager._store(cls())
            return owner._singleton_instance  # type: ignore[return-value]

    @classmethod
    def init(cls: type[_T], *args: Any, **kwargs: Any) -> _T:
        """Create a new shared instance from the given arguments."""
        owner = cls._owner()
        with _LOCK:
            obj = singleton_manager._store(cls(*args, **kwargs))
            owner._singleton_instance = obj
            return obj

    @classmethod
    def f(cls, action: Callable[[Any], object]) -> None:
        """Call ``action`` with the shared instance if one exists."""
        obj = cls._owner()._singleton_instance
        if obj is not None:
            action(obj)

    @classmethod
    def reset(cls) -> None:
        """Release the shared instance, if any."""
        obj = cls._owner()._singleton_instance
        if obj is not None:
            singleton_manager._clear(obj)

    def _release(self) -> None:
        """Hook run when the instance is released; override to free resources."""