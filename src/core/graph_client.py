"""
MS Graph client for operator e-mail, built lazily from secrets.
"""

from azure.identity import ClientSecretCredential
from msgraph import GraphServiceClient

from core.secrets import get_secret

_graph_client: GraphServiceClient | None = None


def get_graph_client() -> GraphServiceClient:
    """
    Get or create the MS Graph client.

    Raises:
        ConfigurationError: if a Graph credential is missing
    """
    global _graph_client
    if _graph_client is None:
        credential = ClientSecretCredential(
            tenant_id=get_secret("/Graph/tenantId"),
            client_id=get_secret("/Graph/appId"),
            client_secret=get_secret("/Graph/clientSecret"),
        )
        _graph_client = GraphServiceClient(credentials=credential)
    return _graph_client
