from .user import UserCreate, UserUpdate, UserOut, Token, TokenPayload
from .organization import (
    OrgRoleEnum, Organization, OrganizationCreate, OrganizationUpdate, OrganizationSummary, UserProfile,
    Member, MemberCreate, MemberUpdate,
)
from .subscription import (
    Subscription, SubscriptionUpdate, SubscriptionOverview, SubscriptionPlanEnum,
    SubscriptionStatusEnum, LimitTypeEnum, LimitWarning,
)
from .customer import Customer, CustomerCreate, CustomerUpdate, CustomerSummary
from .invoice import (
    Invoice, InvoiceCreate, InvoiceUpdate, InvoiceSummary, InvoiceItem, InvoiceItemCreate,
    InvoiceStatusEnum, InvoiceDisplayStatusEnum, InvoiceNumberPreview,
)
from .payment import Payment, PaymentCreate, PaymentReceipt, PaymentListEntry, PaymentStats, PaymentMethodEnum
from .costing import (
    CostingRow, CostingRowIn, CostingSave, ApplyCostingTemplate, ApplyItemTemplate,
    ImportPriceCalculation, InvoiceCosting, CostingItemGroup, CostingPermissionsOut,
    ProfitMarginOut, CostingSummary, CostingSummaryEntry, TemplateLoadModeEnum,
    ItemCostingStatusEnum,
)
from .costing_template import (
    TemplateItem, CostingTemplate, CostingTemplateCreate, CostingTemplateFromInvoice,
    CostingTemplateUpdate, CostingItemTemplate, CostingItemTemplateCreate,
    CostingItemTemplateUpdate, ItemTemplateRow, ItemTemplateRowBase,
)
from .price_calculation import (
    PriceCalculation, PriceCalculationCreate, PriceCalculationUpdate, PriceCalculationSummary,
    PriceCalculationConvert, PriceCalculationConverted, COST_LINES,
)
from .quotation import (
    Quotation, QuotationCreate, QuotationUpdate, QuotationSummary, QuotationItem,
    QuotationItemCreate, QuotationStatusUpdate, QuotationStatusEnum,
)
from .employee import (
    Employee, EmployeeCreate, EmployeeUpdate, EmployeeStatusEnum, SalaryRecord,
    SalaryRecordCreate, SalaryRecordUpdate, SalaryPay, SalarySummary, SalaryStatusEnum,
)
from .dashboard import DashboardStats
from .audit_log import AuditLog
