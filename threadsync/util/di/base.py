"""Base classes for dependency injection providers."""

from typing import ClassVar, Literal

from dishka import Provider

# Swappable infrastructure: the forum API client and the snapshot storage
Component = Literal["forum", "persistence"]


class ProviderBase(Provider):
    """Provider carrying the metadata the container builders select on.

    A mockable component is a provider base with ``__mock_component__`` set
    and two subclasses, one with ``__is_mock__ = True``. The production
    container picks the real subclass; test containers pick the mock unless
    the component is unmocked.

    Attributes:
        __mock_component__: Component name, None for always-real providers
        __is_mock__: Whether this subclass is the in-memory stand-in
    """

    __mock_component__: ClassVar[Component | None] = None
    __is_mock__: ClassVar[bool] = False
