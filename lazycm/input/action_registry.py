"""Reusable action-dispatch table primitives."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from ..actions import Action


@dataclass(frozen=True)
class ActionHandlerBinding:
    """Mapping from one or more actions to a single handler callback."""

    actions: tuple[Action, ...]
    handler: Callable[[], None]


class ActionRegistry:
    """Small action-dispatch table for one mode."""

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._handlers: dict[Action, Callable[[], None]] = {}

    def register_binding(self, binding: ActionHandlerBinding) -> ActionRegistry:
        """Register one binding, overwriting existing handlers for the same actions."""
        for action in binding.actions:
            self._handlers[action] = binding.handler
        return self

    def register_bindings(self, *bindings: ActionHandlerBinding) -> ActionRegistry:
        """Register multiple bindings and return ``self`` for fluent usage."""
        for binding in bindings:
            self.register_binding(binding)
        return self

    @property
    def actions(self) -> frozenset[Action]:
        """Return the registered actions, used as the resolve candidate set."""
        return frozenset(self._handlers)

    def dispatch(self, action: Action | None) -> bool:
        """Invoke the handler for ``action``; ``False`` when none is registered."""
        if action is None:
            return False
        handler = self._handlers.get(action)
        if handler is None:
            return False
        handler()
        return True
