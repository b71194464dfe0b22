from .hubspot_client import HubSpotConversationsClient

__all__ = ["HubSpotConversationsClient"]
