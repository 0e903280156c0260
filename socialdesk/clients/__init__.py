from .oneup import OneUpClient, get_oneup_client
from .content_research import ContentResearchClient, get_content_research_client

__all__ = [
    "OneUpClient",
    "get_oneup_client",
    "ContentResearchClient",
    "get_content_research_client",
]
