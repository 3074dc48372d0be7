# BlurStag Filters - Base Classes
"""
Base classes for the filter system.

All filters are dataclasses with JSON serialization support.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, TYPE_CHECKING
import json

from blurstag.errors import InvalidParameterError

if TYPE_CHECKING:
    from blurstag.image import Image


# Global registry
FILTER_REGISTRY: dict[str, type['Filter']] = {}


def register_filter(cls: type['Filter']) -> type['Filter']:
    """Decorator to register a filter class."""
    FILTER_REGISTRY[cls.__name__] = cls
    # Also register lowercase version
    FILTER_REGISTRY[cls.__name__.lower()] = cls
    return cls


@dataclass
class Filter(ABC):
    """Base class for all filters.

    Example:
        @register_filter
        @dataclass
        class MyFilter(Filter):
            strength: float = 1.0

            def apply(self, image: Image) -> Image:
                ...
    """

    @abstractmethod
    def apply(self, image: 'Image') -> 'Image':
        """Apply filter to image and return result.

        :param image: The input image to process.
        :returns: The processed image.
        """
        pass

    def __call__(self, image: 'Image') -> 'Image':
        return self.apply(image)

    @property
    def type(self) -> str:
        """Filter type name for serialization."""
        return self.__class__.__name__

    def to_dict(self) -> dict[str, Any]:
        """Serialize the public dataclass fields, enums by value, plus ``type``."""
        data: dict[str, Any] = {}
        for f in fields(self):
            if f.name.startswith('_'):
                continue
            value = getattr(self, f.name)
            data[f.name] = value.value if isinstance(value, Enum) else value
        data['type'] = self.type
        return data

    def to_json(self) -> str:
        """Serialize filter to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'Filter':
        """Create a registered filter from :meth:`to_dict` output.

        ``type`` is looked up case-insensitively and defaults to the class
        this is called on.

        :raises InvalidParameterError: If no filter is registered for ``type``
        """
        params = {key: value for key, value in data.items() if key != 'type'}
        name = data.get('type', cls.__name__)
        filter_cls = FILTER_REGISTRY.get(name) or FILTER_REGISTRY.get(str(name).lower())
        if filter_cls is None:
            known = ', '.join(sorted(k for k in FILTER_REGISTRY if k != k.lower()))
            raise InvalidParameterError(f"No filter registered as {name!r}, known: {known}")
        return filter_cls(**params)

    @classmethod
    def from_json(cls, json_str: str) -> 'Filter':
        """Create a filter from a :meth:`to_json` string."""
        return cls.from_dict(json.loads(json_str))


__all__ = ['Filter', 'FILTER_REGISTRY', 'register_filter']
