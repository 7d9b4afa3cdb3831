"""
Role based permission matrices.

Every organization member has exactly one OrgRole. Module permissions are
looked up as MODULE_PERMISSIONS[module][action]; costing has its own, finer
matrix because costing rows and profit figures are internal-only data.
"""
from dataclasses import dataclass
from typing import Dict, Optional, Set, Union

from invoicedesk.schemas.organization import OrgRoleEnum

OWNER = OrgRoleEnum.OWNER
MANAGER = OrgRoleEnum.MANAGER
ACCOUNTS = OrgRoleEnum.ACCOUNTS
SALES_STAFF = OrgRoleEnum.SALES_STAFF
DESIGNER = OrgRoleEnum.DESIGNER
EMPLOYEE = OrgRoleEnum.EMPLOYEE

ALL_ROLES = {OWNER, MANAGER, ACCOUNTS, SALES_STAFF, DESIGNER, EMPLOYEE}

ROLE_LABELS = {
    OWNER: "Owner",
    MANAGER: "Manager",
    ACCOUNTS: "Accounts",
    SALES_STAFF: "Sales Staff",
    DESIGNER: "Designer",
    EMPLOYEE: "Employee",
}

MODULE_PERMISSIONS: Dict[str, Dict[str, Set[OrgRoleEnum]]] = {
    "dashboard": {
        "view": set(ALL_ROLES),
    },
    "customers": {
        "view": {OWNER, MANAGER, ACCOUNTS, SALES_STAFF, EMPLOYEE},
        "create": {OWNER, MANAGER, SALES_STAFF},
        "edit": {OWNER, MANAGER, SALES_STAFF},
        "delete": {OWNER, MANAGER},
    },
    "invoices": {
        "view": {OWNER, MANAGER, ACCOUNTS, SALES_STAFF, EMPLOYEE},
        "create": {OWNER, MANAGER, ACCOUNTS, SALES_STAFF},
        "edit": {OWNER, MANAGER, ACCOUNTS, SALES_STAFF},
        "delete": {OWNER, MANAGER},
    },
    "payments": {
        "view": {OWNER, MANAGER, ACCOUNTS, SALES_STAFF},
        "create": {OWNER, MANAGER, ACCOUNTS},
        "edit": {OWNER, MANAGER, ACCOUNTS},
        "delete": {OWNER, MANAGER},
    },
    "quotations": {
        "view": {OWNER, MANAGER, SALES_STAFF, DESIGNER},
        "create": {OWNER, MANAGER, SALES_STAFF},
        "edit": {OWNER, MANAGER, SALES_STAFF},
        "delete": {OWNER, MANAGER},
    },
    "price_calculations": {
        "view": {OWNER, MANAGER, ACCOUNTS, SALES_STAFF, DESIGNER},
        "create": {OWNER, MANAGER},
        "edit": {OWNER, MANAGER},
        "delete": {OWNER, MANAGER},
    },
    "employees": {
        "view": {OWNER, MANAGER, ACCOUNTS},
        "create": {OWNER, MANAGER},
        "edit": {OWNER, MANAGER},
        "delete": {OWNER},
    },
    "salary": {
        "view": {OWNER, ACCOUNTS},
        "create": {OWNER},
        "edit": {OWNER},
        "delete": {OWNER},
    },
    "team_members": {
        "view": {OWNER, MANAGER},
        "create": {OWNER},
        "edit": {OWNER},
        "delete": {OWNER},
    },
    "settings": {
        "view": {OWNER, MANAGER},
        "edit": {OWNER},
    },
    "audit_logs": {
        "view": {OWNER, MANAGER},
    },
}

_ACTION_LABELS = {
    "view": "view {module}",
    "create": "create {module}",
    "edit": "edit {module}",
    "delete": "delete {module}",
    "costing_view": "view costing",
    "costing_edit": "edit costing data",
    "costing_save": "save costing",
    "costing_reset": "reset costing",
    "costing_profit": "view profit margins",
    "template_view": "view costing templates",
    "template_edit": "manage costing templates",
}


def _coerce_role(role: Union[OrgRoleEnum, str, None]) -> Optional[OrgRoleEnum]:
    if role is None or isinstance(role, OrgRoleEnum):
        return role
    try:
        return OrgRoleEnum(role)
    except ValueError:
        return None


def has_permission(role: Union[OrgRoleEnum, str, None], module: str, action: str) -> bool:
    role = _coerce_role(role)
    if role is None:
        return False
    allowed = MODULE_PERMISSIONS.get(module, {}).get(action)
    if not allowed:
        return False
    return role in allowed


def permission_denied_message(action: str, role: Union[OrgRoleEnum, str, None], module: str = "") -> str:
    role = _coerce_role(role)
    if role is None:
        return "You do not have permission for this action"
    label = _ACTION_LABELS.get(action, action).format(module=module.replace("_", " "))
    return f"{ROLE_LABELS[role]} role cannot {label}. Contact your administrator for access."


@dataclass(frozen=True)
class CostingPermissions:
    can_view: bool = False
    can_edit: bool = False
    can_save: bool = False
    can_reset: bool = False
    can_view_profit: bool = False
    role: Optional[OrgRoleEnum] = None

    @property
    def is_hidden(self) -> bool:
        return not self.can_view

    @property
    def is_read_only(self) -> bool:
        return self.can_view and not self.can_edit


# Manager reset only discards drafts until the next save
_COSTING_MATRIX = {
    OWNER: dict(view=True, edit=True, save=True, reset=True, profit=True),
    MANAGER: dict(view=True, edit=True, save=True, reset=True, profit=True),
    ACCOUNTS: dict(view=True, edit=False, save=False, reset=False, profit=True),
    SALES_STAFF: dict(view=False, edit=False, save=False, reset=False, profit=False),
    DESIGNER: dict(view=False, edit=False, save=False, reset=False, profit=False),
    EMPLOYEE: dict(view=False, edit=False, save=False, reset=False, profit=False),
}


def costing_permissions_for(role: Union[OrgRoleEnum, str, None]) -> CostingPermissions:
    role = _coerce_role(role)
    if role is None:
        return CostingPermissions()
    perms = _COSTING_MATRIX[role]
    return CostingPermissions(
        can_view=perms["view"],
        can_edit=perms["edit"],
        can_save=perms["save"],
        can_reset=perms["reset"],
        can_view_profit=perms["profit"],
        role=role,
    )


@dataclass(frozen=True)
class CostingTemplatePermissions:
    can_view: bool = False
    can_edit: bool = False
    role: Optional[OrgRoleEnum] = None


_TEMPLATE_MATRIX = {
    OWNER: (True, True),
    MANAGER: (True, True),
    ACCOUNTS: (True, False),
    SALES_STAFF: (False, False),
    DESIGNER: (False, False),
    EMPLOYEE: (False, False),
}


def costing_template_permissions_for(role: Union[OrgRoleEnum, str, None]) -> CostingTemplatePermissions:
    role = _coerce_role(role)
    if role is None:
        return CostingTemplatePermissions()
    can_view, can_edit = _TEMPLATE_MATRIX[role]
    return CostingTemplatePermissions(can_view=can_view, can_edit=can_edit, role=role)
