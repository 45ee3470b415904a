from .embed import ChainResolverPort, EmbedFetcherPort
from .metadata import MetadataClientPort

__all__ = [
    "ChainResolverPort",
    "EmbedFetcherPort",
    "MetadataClientPort",
]
