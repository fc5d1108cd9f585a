from .mongodb import create_client, get_collection

__all__ = ["create_client", "get_collection"]
