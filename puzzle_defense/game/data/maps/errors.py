"""Exceptions raised by puzzle map generation and the overworld."""


class PuzzleMapError(Exception):
    """Base class for every map generation error."""


class InvalidPieceError(PuzzleMapError, ValueError):
    """A puzzle piece was built from a malformed tile sequence."""


class OutOfBoundsError(PuzzleMapError, IndexError):
    """A write or lookup fell outside the target map."""


class WeightedSelectionError(PuzzleMapError, ValueError):
    """Weighted selection got an item without a usable weight, or a zero total."""


class EmptyInputError(PuzzleMapError, ValueError):
    """A random selection was asked to pick from nothing."""


class DuplicateNodeError(PuzzleMapError, ValueError):
    """Two overworld nodes share the same tile coordinates."""


class GenerationError(PuzzleMapError, RuntimeError):
    """Puzzle assembly failed on every attempt."""
