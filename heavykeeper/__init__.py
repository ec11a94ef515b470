"""HeavyKeeper sketch for finding the top-k heavy hitters in a stream."""

__version__ = "0.6.0"

__all__ = ["errors", "hashing", "queue", "topk"]