"""Twee text format support: parsing documents and serializing passages."""

from .parser import StoryParser, TweeParser
from .serializer import compose_group, serialize_passage

__all__ = ["StoryParser", "TweeParser", "compose_group", "serialize_passage"]
