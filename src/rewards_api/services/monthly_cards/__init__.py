from .service import MonthlyCardService

__all__ = ["MonthlyCardService"]
