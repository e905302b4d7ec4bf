from pluridesk.models.client import Client
from pluridesk.models.supplier import Supplier
from pluridesk.models.job import Job, JobStatus, PricingType, ServiceType
from pluridesk.models.quote import Quote, QuoteItem, QuoteStatus
from pluridesk.models.invoice import Invoice, InvoiceCounter, InvoiceStatus
from pluridesk.models.payment import Payment
from pluridesk.models.expense import Expense, EXPENSE_CATEGORIES
from pluridesk.models.outsourcing import Outsourcing, OutsourcingStatus
from pluridesk.models.purchase_order import PurchaseOrder

__all__ = [
    "Client",
    "Supplier",
    "Job",
    "JobStatus",
    "PricingType",
    "ServiceType",
    "Quote",
    "QuoteItem",
    "QuoteStatus",
    "Invoice",
    "InvoiceCounter",
    "InvoiceStatus",
    "Payment",
    "Expense",
    "EXPENSE_CATEGORIES",
    "Outsourcing",
    "OutsourcingStatus",
    "PurchaseOrder",
]
