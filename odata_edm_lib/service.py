"""
Factory for services backed by an annotation derived model.
"""

from typing import Iterable, Optional, Union

from .provider import AnnotationEdmProvider

ClassSource = Union[str, Iterable[type]]


def _create_provider(source: ClassSource, verbose: bool = False) -> AnnotationEdmProvider:
    if isinstance(source, str):
        return AnnotationEdmProvider.from_package(source, verbose=verbose)
    return AnnotationEdmProvider(source, verbose=verbose)


class EdmService:
    """A service description: the model provider plus its default container."""

    def __init__(self, provider: AnnotationEdmProvider):
        self.provider = provider

    @property
    def default_container_name(self) -> Optional[str]:
        return self.provider.default_container_name

    @staticmethod
    def create_for(source: ClassSource) -> "EdmServiceFactory":
        """Start building a service from a package name or a collection of classes."""
        return EdmServiceFactory(source)

    @staticmethod
    def create_edm_provider(source: ClassSource, verbose: bool = False) -> AnnotationEdmProvider:
        return _create_provider(source, verbose=verbose)


class EdmServiceFactory:

    def __init__(self, source: ClassSource):
        self.source = source
        self.verbose = False

    def with_verbose(self, verbose: bool = True) -> "EdmServiceFactory":
        self.verbose = verbose
        return self

    def build(self) -> EdmService:
        return EdmService(_create_provider(self.source, verbose=self.verbose))
