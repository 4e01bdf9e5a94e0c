"""In-memory usage statistics gathered between two successful posts.

Decouples counter storage from ``StatsClient`` so the reset logic and the
popular-command selection can be exercised without any I/O.
"""

from __future__ import annotations

import logging

from ..config.constants import CUSTOM_FIELD_DEFAULT, CUSTOM_FIELD_SLOTS, TOP_COMMANDS_LIMIT
from ..errors.internal import InvalidArgument
from ..models import CommandRecord


class UsageAccumulator:
    """Accumulates active users, command counts and the two custom fields.

    Invariant: ``commands_run`` always equals the sum of ``popular_commands``.
    """

    def __init__(self) -> None:
        # dict used as an insertion-ordered set
        self._active_users: dict[str, None] = {}
        self._popular: dict[str, int] = {}
        self._commands_run = 0
        self._custom: dict[int, str] = dict.fromkeys(CUSTOM_FIELD_SLOTS, CUSTOM_FIELD_DEFAULT)

    # ---- read access ----
    @property
    def active_users(self) -> list[str]:
        return list(self._active_users)

    @property
    def commands_run(self) -> int:
        return self._commands_run

    @property
    def popular_commands(self) -> dict[str, int]:
        return dict(self._popular)

    @property
    def custom_fields(self) -> dict[int, str]:
        return dict(self._custom)

    # ---- mutation ----
    def record_command(self, command_name: str, user_id: str) -> CommandRecord:
        """Record one invocation of ``command_name`` by ``user_id``.

        Args:
            command_name: Name of the invoked command.
            user_id: Identifier of the invoking user.

        Returns:
            Snapshot of the command's updated count.

        Raises:
            InvalidArgument: If either argument is not a string.
        """
        if not isinstance(command_name, str):
            raise InvalidArgument(
                f"command_name must be a string, got {type(command_name).__name__}"
            )
        if not isinstance(user_id, str):
            raise InvalidArgument(f"user_id must be a string, got {type(user_id).__name__}")

        self._active_users.setdefault(user_id, None)
        self._commands_run += 1
        count = self._popular.get(command_name, 0) + 1
        self._popular[command_name] = count
        return CommandRecord(name=command_name, count=count)

    def set_custom_field(self, slot: int, value: str | int | float) -> None:
        """Set custom field 1 or 2. The value is sent as a string."""
        if isinstance(slot, bool) or slot not in CUSTOM_FIELD_SLOTS:
            raise InvalidArgument(f"custom field slot must be one of {CUSTOM_FIELD_SLOTS}, got {slot!r}")
        if isinstance(value, bool) or not isinstance(value, str | int | float):
            raise InvalidArgument(
                f"custom field value must be a string or number, got {type(value).__name__}"
            )
        self._custom[slot] = str(value)

    def top_commands(self, limit: int = TOP_COMMANDS_LIMIT) -> list[CommandRecord]:
        """Return the ``limit`` most used commands, highest count first.

        ``sorted`` is stable, so equal counts keep their first-seen order.
        """
        ranked = sorted(self._popular.items(), key=lambda item: item[1], reverse=True)
        return [CommandRecord(name=name, count=count) for name, count in ranked[:limit]]

    def reset(self) -> None:
        """Clear all counters and restore both custom fields to the default."""
        logging.debug(
            f"♻️ Resetting usage stats (commands={self._commands_run} users={len(self._active_users)})"
        )
        self._active_users.clear()
        self._popular.clear()
        self._commands_run = 0
        self._custom = dict.fromkeys(CUSTOM_FIELD_SLOTS, CUSTOM_FIELD_DEFAULT)
