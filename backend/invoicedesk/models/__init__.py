from .user import User
from .organization import Organization, OrganizationMember
from .subscription import Subscription
from .customer import Customer
from .invoice import Invoice, InvoiceItem, InvoiceSequence
from .payment import InvoicePayment
from .costing import InvoiceCostingItem, CostingTemplate, CostingItemTemplate, CostingItemTemplateRow
from .quotation import Quotation, QuotationItem
from .price_calculation import PriceCalculation
from .employee import Employee, SalaryRecord
from .audit_log import AuditLog
