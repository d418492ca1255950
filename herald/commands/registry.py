"""Process-wide command registry.

The registry is filled once while the service starts, frozen, and then
shared read-only with the dispatcher. Frozen registries need no locking.

Usage
-----
Register handlers and freeze before serving::

    registry = CommandRegistry()
    registry.register("assignme", PermissionLevel.READ, AssignActor(client))
    registry.freeze()
    spec = registry.lookup("assignme")

"""

from __future__ import annotations

import dataclasses
import typing as typ

from herald.github.models import ReactionContent

from .errors import DuplicateCommandError, InvalidCommandTokenError, RegistryFrozenError
from .parser import is_valid_token

if typ.TYPE_CHECKING:
    from herald.permissions import PermissionLevel

    from .handlers import CommandHandler


@dataclasses.dataclass(frozen=True, slots=True)
class HandlerSpec:
    """Binding of a command token to its handler and permission floor.

    Attributes
    ----------
    token
        Command token without the slash.
    permission
        Minimum repository permission an actor needs to run the command.
    handler
        Handler invoked once per authorised command.
    reaction
        Reaction added to the triggering comment, or ``None`` for none.

    """

    token: str
    permission: PermissionLevel
    handler: CommandHandler
    reaction: ReactionContent | None = ReactionContent.ROCKET


class CommandRegistry:
    """Map of command tokens to :class:`HandlerSpec` entries."""

    def __init__(self) -> None:
        """Create an empty, writable registry."""
        self._specs: dict[str, HandlerSpec] = {}
        self._frozen = False

    def register(
        self,
        token: str,
        permission: PermissionLevel,
        handler: CommandHandler,
        *,
        reaction: ReactionContent | None = ReactionContent.ROCKET,
    ) -> HandlerSpec:
        """Register *handler* for *token* and return the stored spec.

        Raises
        ------
        InvalidCommandTokenError
            If *token* is not a valid command token.
        DuplicateCommandError
            If *token* is already registered.
        RegistryFrozenError
            If :meth:`freeze` has been called.

        """
        if self._frozen:
            raise RegistryFrozenError(token)
        if not is_valid_token(token):
            raise InvalidCommandTokenError(token)
        if token in self._specs:
            raise DuplicateCommandError(token)

        spec = HandlerSpec(
            token=token,
            permission=permission,
            handler=handler,
            reaction=reaction,
        )
        self._specs[token] = spec
        return spec

    def lookup(self, token: str) -> HandlerSpec | None:
        """Return the HandlerSpec for *token*, or ``None`` when it is unknown."""
        return self._specs.get(token)

    def freeze(self) -> None:
        """Refuse further registrations."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        """Return True once the registry no longer accepts registrations."""
        return self._frozen

    @property
    def tokens(self) -> tuple[str, ...]:
        """Return registered tokens in registration order."""
        return tuple(self._specs)

    def __len__(self) -> int:
        """Return the number of registered commands."""
        return len(self._specs)

    def __contains__(self, token: object) -> bool:
        """Return True when *token* is registered."""
        return token in self._specs
