from .client import RetailApiClient, RetailApiError, RetailSession, format_discount

__all__ = ["RetailApiClient", "RetailApiError", "RetailSession", "format_discount"]
