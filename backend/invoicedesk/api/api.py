from fastapi import APIRouter

# Import endpoint modules
from invoicedesk.api.endpoints import login
from invoicedesk.api.endpoints import users
from invoicedesk.api.endpoints import organizations
from invoicedesk.api.endpoints import customers
from invoicedesk.api.endpoints import invoices
from invoicedesk.api.endpoints import payments
from invoicedesk.api.endpoints import costing
from invoicedesk.api.endpoints import costing_templates
from invoicedesk.api.endpoints import costing_item_templates
from invoicedesk.api.endpoints import price_calculations
from invoicedesk.api.endpoints import quotations
from invoicedesk.api.endpoints import employees
from invoicedesk.api.endpoints import salary_records
from invoicedesk.api.endpoints import dashboard
from invoicedesk.api.endpoints import audit_logs

api_router = APIRouter()

api_router.include_router(login.router, prefix="/login", tags=["Login"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(organizations.router, prefix="/organizations", tags=["Organizations"])
api_router.include_router(customers.router, prefix="/customers", tags=["Customers"])
api_router.include_router(invoices.router, prefix="/invoices", tags=["Invoices"])
# Payment and costing routes live under /invoices/{id}/... and their own roots
api_router.include_router(payments.router, tags=["Payments"])
api_router.include_router(costing.router, tags=["Costing"])
api_router.include_router(costing_templates.router, prefix="/costing-templates", tags=["Costing Templates"])
api_router.include_router(costing_item_templates.router, prefix="/costing-item-templates", tags=["Costing Item Templates"])
api_router.include_router(price_calculations.router, prefix="/price-calculations", tags=["Price Calculations"])
api_router.include_router(quotations.router, prefix="/quotations", tags=["Quotations"])
api_router.include_router(employees.router, prefix="/employees", tags=["Employees"])
api_router.include_router(salary_records.router, prefix="/salary-records", tags=["Salary Records"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(audit_logs.router, prefix="/audit-logs", tags=["Audit Logs"])
