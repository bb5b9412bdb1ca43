from crm.services.analytics_service import AnalyticsService
from crm.services.seller_service import SellerService
from crm.services.transaction_service import TransactionService

__all__ = ["AnalyticsService", "SellerService", "TransactionService"]
