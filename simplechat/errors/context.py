"""Context window exceptions."""


class ContextOverflowError(Exception):
    """Raised when a pending batch does not fit in the context window.

    Attributes:
        used: Token positions already occupied.
        batch_size: Tokens in the batch that was about to be decoded.
        capacity: Size of the context window.
    """

    def __init__(self, *, used: int, batch_size: int, capacity: int) -> None:
        super().__init__(
            f"context size exceeded: used={used} batch={batch_size} capacity={capacity}"
        )
        self.used = used
        self.batch_size = batch_size
        self.capacity = capacity


__all__ = ["ContextOverflowError"]
