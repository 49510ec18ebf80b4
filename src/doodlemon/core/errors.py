"""Error kinds raised by the creature core.

The API layer maps each kind to an HTTP status. Messages are meant to be
shown to the user directly.
"""


class DoodlemonError(Exception):
    """Base class for all Doodlemon errors."""

    pass


class ValidationError(DoodlemonError):
    """Input was rejected before any external call was made."""

    pass


class GenerationError(DoodlemonError):
    """The generative model failed (quota, timeout, bad key, bad output)."""

    pass


class NotFoundError(DoodlemonError):
    """No creature exists with the requested id."""

    def __init__(self, creature_id: int):
        super().__init__(f"Creature {creature_id} not found")
        self.creature_id = creature_id
