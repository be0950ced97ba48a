"""Asset doubles with hostile transfer behavior."""

from collections.abc import Callable

from pairdex.assets import Token


class CallbackToken(Token):
    """Token that runs a callback after every transfer once armed.

    Used to call back into a pool while that pool is mid-operation.
    """

    callback: Callable[[], None] | None = None

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        super()._move(sender, recipient, amount)
        if self.callback is not None:
            self.callback()
