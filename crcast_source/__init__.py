"""CrCast deck source: fetches CrCast decks and shapes them into call/response cards."""

__version__ = "0.1.0"
