class PreconditionError(ValueError):
    """Inputs that violate a render precondition (shape, dimensions, viewport)."""


class RenderError(RuntimeError):
    """A band failed; the buffer it was writing into must not be used."""


class RenderCancelled(RenderError):
    """The render was cancelled before every band had run."""
