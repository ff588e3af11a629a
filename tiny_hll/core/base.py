"""
Base classes and interfaces for tiny-hll cardinality estimators.

This module defines the abstract base class that sketches implement to
provide a consistent interface: updating with new items, querying the
estimate, merging with other sketches, serialization, and statistics.
"""

import abc
import json
import sys
from typing import Any, Dict, Iterable, Union

from tiny_hll.core.errors import DeserializationError
from tiny_hll.core.hash import Hashable


class CardinalityEstimator(abc.ABC):
    """
    Abstract base class for cardinality estimation algorithms.

    Subclasses hash each item they are given and keep a bounded summary from
    which the number of distinct items can be estimated. The summary is
    fully described by its serialized form; no other state is kept.
    """

    @abc.abstractmethod
    def add(self, data: Hashable) -> None:
        """
        Add an item to the summary.

        Args:
            data: The item to add, as bytes or text.
        """
        pass

    def update(self, item: Hashable) -> None:
        """Alias of add() for stream-processing call sites."""
        self.add(item)

    def add_all(self, items: Iterable[Hashable]) -> None:
        """
        Add every item of an iterable.

        Args:
            items: Items to add, in order.
        """
        for item in items:
            self.add(item)

    @abc.abstractmethod
    def cardinality(self) -> float:
        """
        Estimate the number of distinct items added so far.

        Returns:
            The estimated cardinality as a float.
        """
        pass

    def estimate_cardinality(self) -> int:
        """
        Estimate the number of distinct items, rounded to the nearest integer.

        Returns:
            The estimated cardinality.

        Raises:
            OverflowError: If the estimate is infinite (saturated summary).
        """
        return int(round(self.cardinality()))

    @abc.abstractmethod
    def merge(self, other: "CardinalityEstimator") -> None:
        """
        Merge another summary of the same type into this one, in place.

        Args:
            other: Another summary of the same type. It is not modified.

        Raises:
            TypeError: If other is not of the same type.
        """
        pass

    def _check_same_type(self, other: "CardinalityEstimator") -> None:
        """
        Helper method to check if another summary is of the same type.

        Raises:
            TypeError: If other is not of the same type.
        """
        if not isinstance(other, self.__class__):
            raise TypeError(f"Cannot merge with {other.__class__.__name__}")

    @abc.abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the summary to a dictionary for serialization.

        Returns:
            A dictionary representation of the summary.
        """
        pass

    def _base_dict(self) -> Dict[str, Any]:
        """Dictionary entries common to all summaries."""
        return {"type": self.__class__.__name__}

    @classmethod
    @abc.abstractmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CardinalityEstimator":
        """
        Create a summary from a dictionary representation.

        Args:
            data: The dictionary containing the summary state.

        Returns:
            A new summary initialized with the given state.
        """
        pass

    @abc.abstractmethod
    def to_bytes(self) -> bytes:
        """Encode the summary in its compact binary form."""
        pass

    @classmethod
    @abc.abstractmethod
    def from_bytes(cls, data: bytes) -> "CardinalityEstimator":
        """Decode a summary produced by to_bytes()."""
        pass

    def serialize(self, format: str = "json") -> Union[str, bytes]:
        """
        Serialize the summary to a string or bytes.

        Args:
            format: The serialization format ('json' or 'binary').

        Returns:
            The serialized representation of the summary.

        Raises:
            ValueError: If the format is not supported.
            DeserializationError: If the data is not valid UTF-8 JSON.
        """
        if format == "json":
            return json.dumps(self.to_dict())
        elif format == "binary":
            return self.to_bytes()
        else:
            raise ValueError(f"Unsupported serialization format: {format}")

    @classmethod
    def deserialize(
        cls, data: Union[str, bytes], format: str = "json"
    ) -> "CardinalityEstimator":
        """
        Deserialize a summary from a string or bytes.

        Args:
            data: The serialized summary.
            format: The serialization format ('json' or 'binary').

        Returns:
            A new summary.

        Raises:
            ValueError: If the format is not supported.
            DeserializationError: If JSON data is not valid UTF-8 JSON.
        """
        if format == "json":
            try:
                if isinstance(data, bytes):
                    data = data.decode("utf-8")
                payload = json.loads(data)
            except (UnicodeDecodeError, json.JSONDecodeError) as exc:
                raise DeserializationError(f"Invalid JSON sketch data: {exc}") from exc
            return cls.from_dict(payload)
        elif format == "binary":
            if isinstance(data, str):
                raise TypeError("Binary deserialization requires bytes")
            return cls.from_bytes(data)
        else:
            raise ValueError(f"Unsupported serialization format: {format}")

    def estimate_size(self) -> int:
        """
        Estimate the current memory usage of this summary in bytes.

        This is a rough figure covering the object and its instance
        dictionary. Derived classes add their own data structures.

        Returns:
            Estimated memory usage in bytes.
        """
        size = sys.getsizeof(self)
        if hasattr(self, "__dict__"):
            size += sys.getsizeof(self.__dict__)
        return size

    def error_bounds(self) -> Dict[str, float]:
        """
        Get the theoretical error bounds for this summary.

        The base implementation returns an empty dictionary.
        """
        return {}

    def get_stats(self) -> Dict[str, Any]:
        """
        Get detailed statistics about the current state of the summary.

        Derived classes extend this with algorithm-specific entries while
        calling super().get_stats() to include the base metrics.

        Returns:
            A dictionary containing various statistics about the summary state.
        """
        stats: Dict[str, Any] = {
            "type": self.__class__.__name__,
            "memory_bytes": self.estimate_size(),
            "estimated_cardinality": self.cardinality(),
        }
        stats.update(self.error_bounds())
        return stats
