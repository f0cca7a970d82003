from src.core.orders.service import OrderEconomicsService

__all__ = ["OrderEconomicsService"]
