"""Static catalog of backend operations.

Every remote call goes through exactly one :class:`Operation`. The catalog maps each
operation to its path template, HTTP method, and the two independent auth flags that
decide which token headers the transport attaches. Both flags default to ``True``;
only the device-activation, PIN-login and setup routes opt out.
"""

from __future__ import annotations

import string
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Tuple
from urllib.parse import quote

from .errors import InvalidRequest


class HTTPMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


class Operation(str, Enum):
    """Named backend operations."""

    # Setup
    SETUP_STATUS = "setup_status"
    SETUP_SYNC_LOCATIONS = "setup_sync_locations"
    INITIAL_SETUP = "initial_setup"

    # Auth
    DEVICE_ACTIVATE = "device_activate"
    PIN_LOGIN = "pin_login"
    PIN_REFRESH = "pin_refresh"
    SWITCH_LOCATION = "switch_location"
    CURRENT_USER = "current_user"
    LOGOUT = "logout"
    AUDIT_LOGS = "audit_logs"

    # Employees
    CREATE_EMPLOYEE = "create_employee"
    LIST_EMPLOYEES = "list_employees"
    GET_EMPLOYEE = "get_employee"
    UPDATE_EMPLOYEE = "update_employee"
    DELETE_EMPLOYEE = "delete_employee"
    RESET_PIN = "reset_pin"
    RESET_PIN_LOCKOUT = "reset_pin_lockout"
    ASSIGN_LOCATIONS = "assign_locations"

    # Inventory receiving
    RECEIVE_INVENTORY = "receive_inventory"
    GET_RECEIVING = "get_receiving"
    LIST_RECEIVINGS_BY_LOCATION = "list_receivings_by_location"
    LIST_RECEIVINGS_BY_PRODUCT = "list_receivings_by_product"
    RECEIVING_SUMMARY = "receiving_summary"
    RETRY_SQUARE_SYNC = "retry_square_sync"

    # Adjustments
    CREATE_ADJUSTMENT = "create_adjustment"
    ADJUSTMENT_DAMAGE = "adjustment_damage"
    ADJUSTMENT_THEFT = "adjustment_theft"
    ADJUSTMENT_EXPIRED = "adjustment_expired"
    ADJUSTMENT_FOUND = "adjustment_found"
    ADJUSTMENT_RETURN = "adjustment_return"
    ADJUSTMENT_COUNT_CORRECTION = "adjustment_count_correction"
    ADJUSTMENT_WRITE_OFF = "adjustment_write_off"
    GET_ADJUSTMENT = "get_adjustment"
    ADJUSTMENTS_BY_PRODUCT = "adjustments_by_product"
    ADJUSTMENTS_BY_LOCATION = "adjustments_by_location"
    ADJUSTMENT_SUMMARY = "adjustment_summary"
    ADJUSTMENT_TYPES = "adjustment_types"

    # Reports
    COGS_REPORT = "cogs_report"
    VALUATION_REPORT = "valuation_report"
    PROFIT_MARGIN_REPORT = "profit_margin_report"
    ADJUSTMENT_IMPACT_REPORT = "adjustment_impact_report"
    RECEIVING_SUMMARY_REPORT = "receiving_summary_report"
    PROFIT_LOSS_REPORT = "profit_loss_report"
    DASHBOARD_REPORT = "dashboard_report"

    # Expenses
    CREATE_EXPENSE = "create_expense"
    LIST_EXPENSES = "list_expenses"
    GET_EXPENSE = "get_expense"
    UPDATE_EXPENSE = "update_expense"
    DELETE_EXPENSE = "delete_expense"
    EXPENSE_SUMMARY = "expense_summary"
    EXPENSE_TYPES = "expense_types"

    # Inventory aging
    AGING_SUMMARY = "aging_summary"
    AGING_PRODUCTS = "aging_products"
    AGING_LOCATION = "aging_location"
    AGING_CATEGORY = "aging_category"
    AGING_SIGNALS = "aging_signals"
    AGING_EXPIRING = "aging_expiring"
    AGING_CLEAR_CACHE = "aging_clear_cache"

    # Reconciliation
    RECONCILE_PRODUCT = "reconcile_product"
    RECONCILE_LOCATION = "reconcile_location"
    CONSUMPTION_SUMMARY = "consumption_summary"
    SALE_ITEM_CONSUMPTION = "sale_item_consumption"
    VERIFY_FIFO = "verify_fifo"
    BATCH_DETAIL = "batch_detail"

    # Locations
    LIST_LOCATIONS = "list_locations"
    GET_LOCATION = "get_location"

    # Products
    LIST_PRODUCTS = "list_products"
    GET_PRODUCT = "get_product"
    CREATE_PRODUCT = "create_product"
    UPDATE_PRODUCT_PRICE = "update_product_price"
    PRODUCT_SUPPLIERS = "product_suppliers"
    PRODUCT_COST_HISTORY = "product_cost_history"
    SUPPLIER_CATALOG = "supplier_catalog"

    # Suppliers
    LIST_SUPPLIERS = "list_suppliers"


@dataclass(frozen=True)
class Endpoint:
    """A fully resolved call target: concrete path plus method and auth flags."""

    name: str
    path: str
    method: HTTPMethod
    requires_primary_token: bool = True
    requires_session_token: bool = True


@dataclass(frozen=True)
class EndpointSpec:
    """Catalog entry describing how to build an :class:`Endpoint`."""

    name: str
    path_template: str
    method: HTTPMethod
    requires_primary_token: bool = True
    requires_session_token: bool = True

    @property
    def parameters(self) -> Tuple[str, ...]:
        return tuple(
            field for _, field, _, _ in string.Formatter().parse(self.path_template) if field
        )

    def path(self, **params: str) -> str:
        expected = set(self.parameters)
        missing = expected.difference(params)
        if missing:
            raise InvalidRequest(
                f"{self.name} requires path parameter(s): {', '.join(sorted(missing))}"
            )
        unexpected = set(params).difference(expected)
        if unexpected:
            raise InvalidRequest(
                f"{self.name} got unexpected path parameter(s): {', '.join(sorted(unexpected))}"
            )
        encoded: dict[str, str] = {}
        for key, value in params.items():
            text = str(value)
            if not text:
                raise InvalidRequest(f"{self.name} path parameter {key!r} is empty")
            encoded[key] = quote(text, safe="")
        return self.path_template.format(**encoded)

    def resolve(self, **params: str) -> Endpoint:
        return Endpoint(
            name=self.name,
            path=self.path(**params),
            method=self.method,
            requires_primary_token=self.requires_primary_token,
            requires_session_token=self.requires_session_token,
        )


_GET = HTTPMethod.GET
_POST = HTTPMethod.POST
_PUT = HTTPMethod.PUT
_PATCH = HTTPMethod.PATCH
_DELETE = HTTPMethod.DELETE


def _entry(
    op: Operation,
    template: str,
    method: HTTPMethod,
    *,
    primary: bool = True,
    session: bool = True,
) -> Tuple[Operation, EndpointSpec]:
    return op, EndpointSpec(
        name=op.value,
        path_template=template,
        method=method,
        requires_primary_token=primary,
        requires_session_token=session,
    )


CATALOG: Mapping[Operation, EndpointSpec] = MappingProxyType(
    dict(
        [
            # Setup (unauthenticated)
            _entry(Operation.SETUP_STATUS, "/auth/setup/status", _GET, primary=False, session=False),
            _entry(
                Operation.SETUP_SYNC_LOCATIONS,
                "/auth/setup/sync-locations",
                _POST,
                primary=False,
                session=False,
            ),
            _entry(Operation.INITIAL_SETUP, "/auth/setup/initial", _POST, primary=False, session=False),
            # Auth
            _entry(
                Operation.DEVICE_ACTIVATE,
                "/auth/device/activate",
                _POST,
                primary=False,
                session=False,
            ),
            _entry(Operation.PIN_LOGIN, "/auth/pin", _POST, session=False),
            _entry(Operation.PIN_REFRESH, "/auth/pin/refresh", _POST),
            _entry(Operation.SWITCH_LOCATION, "/auth/switch-location", _POST),
            _entry(Operation.CURRENT_USER, "/auth/me", _GET),
            _entry(Operation.LOGOUT, "/auth/logout", _POST),
            _entry(Operation.AUDIT_LOGS, "/auth/audit-logs", _GET),
            # Employees
            _entry(Operation.CREATE_EMPLOYEE, "/employees", _POST),
            _entry(Operation.LIST_EMPLOYEES, "/employees", _GET),
            _entry(Operation.GET_EMPLOYEE, "/employees/{id}", _GET),
            _entry(Operation.UPDATE_EMPLOYEE, "/employees/{id}", _PUT),
            _entry(Operation.DELETE_EMPLOYEE, "/employees/{id}", _DELETE),
            _entry(Operation.RESET_PIN, "/employees/{employee_id}/pin", _POST),
            _entry(Operation.RESET_PIN_LOCKOUT, "/employees/{employee_id}/pin/reset-lockout", _POST),
            _entry(Operation.ASSIGN_LOCATIONS, "/employees/{employee_id}/locations", _POST),
            # Inventory receiving
            _entry(Operation.RECEIVE_INVENTORY, "/inventory/receive", _POST),
            _entry(Operation.GET_RECEIVING, "/inventory/receive/{id}", _GET),
            _entry(
                Operation.LIST_RECEIVINGS_BY_LOCATION,
                "/inventory/receive/location/{location_id}",
                _GET,
            ),
            _entry(
                Operation.LIST_RECEIVINGS_BY_PRODUCT,
                "/inventory/receive/product/{product_id}",
                _GET,
            ),
            _entry(
                Operation.RECEIVING_SUMMARY,
                "/inventory/receive/location/{location_id}/summary",
                _GET,
            ),
            _entry(
                Operation.RETRY_SQUARE_SYNC,
                "/inventory/receive/{receiving_id}/retry-square-sync",
                _POST,
            ),
            # Adjustments
            _entry(Operation.CREATE_ADJUSTMENT, "/inventory/adjustments", _POST),
            _entry(Operation.ADJUSTMENT_DAMAGE, "/inventory/adjustments/damage", _POST),
            _entry(Operation.ADJUSTMENT_THEFT, "/inventory/adjustments/theft", _POST),
            _entry(Operation.ADJUSTMENT_EXPIRED, "/inventory/adjustments/expired", _POST),
            _entry(Operation.ADJUSTMENT_FOUND, "/inventory/adjustments/found", _POST),
            _entry(Operation.ADJUSTMENT_RETURN, "/inventory/adjustments/return", _POST),
            _entry(
                Operation.ADJUSTMENT_COUNT_CORRECTION,
                "/inventory/adjustments/count-correction",
                _POST,
            ),
            _entry(Operation.ADJUSTMENT_WRITE_OFF, "/inventory/adjustments/write-off", _POST),
            _entry(Operation.GET_ADJUSTMENT, "/inventory/adjustments/{id}", _GET),
            _entry(
                Operation.ADJUSTMENTS_BY_PRODUCT,
                "/inventory/adjustments/product/{product_id}",
                _GET,
            ),
            _entry(
                Operation.ADJUSTMENTS_BY_LOCATION,
                "/inventory/adjustments/location/{location_id}",
                _GET,
            ),
            _entry(
                Operation.ADJUSTMENT_SUMMARY,
                "/inventory/adjustments/location/{location_id}/summary",
                _GET,
            ),
            _entry(Operation.ADJUSTMENT_TYPES, "/inventory/adjustments/types/list", _GET),
            # Reports
            _entry(Operation.COGS_REPORT, "/inventory/reports/cogs", _GET),
            _entry(Operation.VALUATION_REPORT, "/inventory/reports/valuation", _GET),
            _entry(Operation.PROFIT_MARGIN_REPORT, "/inventory/reports/profit-margin", _GET),
            _entry(Operation.ADJUSTMENT_IMPACT_REPORT, "/inventory/reports/adjustment-impact", _GET),
            _entry(Operation.RECEIVING_SUMMARY_REPORT, "/inventory/reports/receiving-summary", _GET),
            _entry(Operation.PROFIT_LOSS_REPORT, "/inventory/reports/profit-loss", _GET),
            _entry(Operation.DASHBOARD_REPORT, "/inventory/reports/dashboard", _GET),
            # Expenses
            _entry(Operation.CREATE_EXPENSE, "/expenses", _POST),
            _entry(Operation.LIST_EXPENSES, "/expenses", _GET),
            _entry(Operation.GET_EXPENSE, "/expenses/{id}", _GET),
            _entry(Operation.UPDATE_EXPENSE, "/expenses/{id}", _PUT),
            _entry(Operation.DELETE_EXPENSE, "/expenses/{id}", _DELETE),
            _entry(Operation.EXPENSE_SUMMARY, "/expenses/summary/report", _GET),
            _entry(Operation.EXPENSE_TYPES, "/expenses/types/list", _GET),
            # Inventory aging
            _entry(Operation.AGING_SUMMARY, "/inventory/aging/summary", _GET),
            _entry(Operation.AGING_PRODUCTS, "/inventory/aging/products", _GET),
            _entry(Operation.AGING_LOCATION, "/inventory/aging/location", _GET),
            _entry(Operation.AGING_CATEGORY, "/inventory/aging/category", _GET),
            _entry(Operation.AGING_SIGNALS, "/inventory/aging/signals", _GET),
            _entry(Operation.AGING_EXPIRING, "/inventory/aging/expiring", _GET),
            _entry(Operation.AGING_CLEAR_CACHE, "/inventory/aging/clear-cache", _POST),
            # Reconciliation
            _entry(
                Operation.RECONCILE_PRODUCT,
                "/inventory/reconciliation/product/{product_id}",
                _GET,
            ),
            _entry(
                Operation.RECONCILE_LOCATION,
                "/inventory/reconciliation/location/{location_id}",
                _GET,
            ),
            _entry(
                Operation.CONSUMPTION_SUMMARY,
                "/inventory/reconciliation/consumption/{product_id}",
                _GET,
            ),
            _entry(
                Operation.SALE_ITEM_CONSUMPTION,
                "/inventory/reconciliation/sale-item/{sale_item_id}",
                _GET,
            ),
            _entry(
                Operation.VERIFY_FIFO,
                "/inventory/reconciliation/verify-fifo/{sale_id}",
                _GET,
            ),
            _entry(Operation.BATCH_DETAIL, "/inventory/reports/batch/{batch_id}", _GET),
            # Locations
            _entry(Operation.LIST_LOCATIONS, "/locations", _GET),
            _entry(Operation.GET_LOCATION, "/locations/{id}", _GET),
            # Products
            _entry(Operation.LIST_PRODUCTS, "/products", _GET),
            _entry(Operation.GET_PRODUCT, "/products/{id}", _GET),
            _entry(Operation.CREATE_PRODUCT, "/products", _POST),
            _entry(Operation.UPDATE_PRODUCT_PRICE, "/products/{id}/price", _PATCH),
            _entry(Operation.PRODUCT_SUPPLIERS, "/products/{product_id}/suppliers", _GET),
            _entry(Operation.PRODUCT_COST_HISTORY, "/products/{product_id}/cost-history", _GET),
            _entry(
                Operation.SUPPLIER_CATALOG,
                "/products/supplier-catalog/{supplier_id}",
                _GET,
            ),
            # Suppliers
            _entry(Operation.LIST_SUPPLIERS, "/admin/inventory/cutover/suppliers", _GET),
        ]
    )
)


def spec_for(operation: Operation | str) -> EndpointSpec:
    """Return the catalog entry for ``operation``."""

    try:
        return CATALOG[Operation(operation)]
    except ValueError as exc:
        raise InvalidRequest(f"Unknown operation: {operation}") from exc


def endpoint(operation: Operation | str, **params: str) -> Endpoint:
    """Resolve ``operation`` into a concrete :class:`Endpoint`."""

    return spec_for(operation).resolve(**params)


__all__ = ["CATALOG", "Endpoint", "EndpointSpec", "HTTPMethod", "Operation", "endpoint", "spec_for"]
