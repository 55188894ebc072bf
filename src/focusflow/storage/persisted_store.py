# src/focusflow/storage/persisted_store.py

"""
Persisted reactive store.

A key-keyed container of durable values with change notification:
- read(key) returns the in-memory value, hydrating it from the backend on first access,
- write(key, value_or_fn) applies a value (or a pure transform of the previous value),
  persists it synchronously and notifies same-process subscribers,
- apply_external_change(key, raw) replaces the in-memory value with a value written
  by another execution context (last-write-wins, no merge).

Corrupt or incompatible stored data never raises past read(): the store logs a
warning and falls back to the registered default.
"""

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ..core.ports import KeyValueBackend

logger = logging.getLogger(__name__)

Listener = Callable[[Any], None]
Decoder = Callable[[Any], Any]
Encoder = Callable[[Any], Any]


def _identity(value: Any) -> Any:
    return value


@dataclass(slots=True)
class _Slot:
    default: Any
    decode: Decoder
    encode: Encoder
    loaded: bool = False
    value: Any = None

    def fresh_default(self) -> Any:
        return copy.deepcopy(self.default)


class PersistedStore:
    """
    Thread-safety:
    - none; the store is driven from a single event loop (cooperative scheduling)

    decode/encode convert between the JSON-compatible structure and the in-memory
    value. JSON (de)serialization itself is done by the store.
    """

    def __init__(self, backend: KeyValueBackend) -> None:
        self._backend = backend
        self._slots: dict[str, _Slot] = {}
        self._listeners: dict[str, list[Listener]] = {}

    @property
    def backend(self) -> KeyValueBackend:
        return self._backend

    def register(
        self,
        key: str,
        default: Any,
        *,
        decode: Decoder | None = None,
        encode: Encoder | None = None,
    ) -> None:
        if key in self._slots:
            raise ValueError(f"key already registered: {key}")
        self._slots[key] = _Slot(default=default, decode=decode or _identity, encode=encode or _identity)

    def keys(self) -> list[str]:
        return list(self._slots)

    def _slot(self, key: str) -> _Slot:
        slot = self._slots.get(key)
        if slot is None:
            raise KeyError(f"unknown store key: {key}")
        return slot

    def _decode_raw(self, key: str, slot: _Slot, raw: str) -> Any:
        return slot.decode(json.loads(raw))

    def _load(self, key: str, slot: _Slot) -> Any:
        try:
            raw = self._backend.get(key)
        except Exception as e:
            logger.warning("Error reading store key %r: %s; using default", key, e)
            return slot.fresh_default()

        if raw is None:
            return slot.fresh_default()

        try:
            return self._decode_raw(key, slot, raw)
        except Exception as e:
            logger.warning("Error decoding store key %r: %s; using default", key, e)
            return slot.fresh_default()

    # ---- public API ----

    def read(self, key: str) -> Any:
        slot = self._slot(key)
        if not slot.loaded:
            slot.value = self._load(key, slot)
            slot.loaded = True
        return slot.value

    def write(self, key: str, value: Any) -> Any:
        """
        Replace the value under key.

        value may be a plain value or a callable receiving the previous value and
        returning the next one. Returns the stored value.
        """
        slot = self._slot(key)
        prev = self.read(key)
        new_value = value(prev) if callable(value) else value

        slot.value = new_value
        slot.loaded = True

        try:
            raw = json.dumps(slot.encode(new_value), ensure_ascii=False)
            self._backend.set(key, raw)
        except Exception as e:
            logger.warning("Error persisting store key %r: %s", key, e)

        self._notify(key, new_value)
        return new_value

    def subscribe(self, key: str, listener: Listener) -> Callable[[], None]:
        """Register listener(value) for key. Returns an unsubscribe callable."""
        self._slot(key)
        listeners = self._listeners.setdefault(key, [])
        listeners.append(listener)

        def _unsubscribe() -> None:
            try:
                listeners.remove(listener)
            except ValueError:
                pass

        return _unsubscribe

    def apply_external_change(self, key: str, raw: str | None) -> None:
        """
        Adopt a value written by another execution context.

        raw=None means the key was removed there: revert to the default.
        Undecodable payloads are logged and ignored.
        """
        slot = self._slots.get(key)
        if slot is None:
            logger.debug("External change for unregistered key %r ignored", key)
            return

        if raw is None:
            new_value = slot.fresh_default()
        else:
            try:
                new_value = self._decode_raw(key, slot, raw)
            except Exception as e:
                logger.warning("Error parsing external change for key %r: %s", key, e)
                return

        slot.value = new_value
        slot.loaded = True
        logger.debug("Store key %r replaced by external change", key)
        self._notify(key, new_value)

    def reload(self) -> None:
        """Re-hydrate every registered key from the backend and notify subscribers."""
        for key, slot in self._slots.items():
            slot.value = self._load(key, slot)
            slot.loaded = True
            self._notify(key, slot.value)

    def close(self) -> None:
        self._listeners.clear()
        try:
            self._backend.close()
        except Exception:
            logger.debug("Backend close failed.", exc_info=True)

    def _notify(self, key: str, value: Any) -> None:
        for listener in list(self._listeners.get(key, ())):
            try:
                listener(value)
            except Exception:
                logger.exception("Store listener failed key=%s", key)
