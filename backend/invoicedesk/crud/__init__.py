from . import crud_user as user
from . import crud_organization as organization
from . import crud_subscription as subscription
from . import crud_customer as customer
from . import crud_invoice as invoice
from . import crud_payment as payment
from . import crud_audit_log as audit_log
from . import crud_costing as costing
from . import crud_costing_template as costing_template
from . import crud_costing_item_template as costing_item_template
from . import crud_price_calculation as price_calculation
from . import crud_quotation as quotation
from . import crud_employee as employee
from . import crud_dashboard as dashboard
