"""
propshare - Fractional Real-Estate Share Ledger

Registers properties, sells and buys back fungible shares of each property
against the pool at a price derived from its valuation, collects rent and
distributes pooled funds pro-rata to current shareholders.

Usage:
    from propshare import (
        PropertyLedger, StaticAdministrators, InMemoryTransfer, ManualClock,
    )

    payments = InMemoryTransfer()
    ledger = PropertyLedger(
        admin=StaticAdministrators({"admin"}),
        transfers=payments,
        clock=ManualClock(),
    )

    pid = ledger.register_property("admin", total_shares=100,
                                   rental_payment=10, property_value=1000)
    ledger.purchase_shares("alice", pid, count=20, payment_amount=200)

    # Rent is due on the 80 shares still in the pool: 10 * 80
    ledger.receive_rental_payment("admin", pid, 800)

    result = ledger.distribute_dividends("admin", pid)
    payments.received("alice")   # 160 (8 per share x 20 shares)
"""

# Core types
from .core import (
    RENT_UPDATE_COOLDOWN,
    Identity,
    Holdings,
    PropertyDetails,
    Notification,
    EventType,
    AdminCapability,
    ValueTransfer,
    SupportsRollback,
    Clock,
    NotificationSink,
    PropertyLedgerError,
    InvalidArgument,
    NotFound,
    Unauthorized,
    Obsolete,
    InsufficientSupply,
    InsufficientBalance,
    InsufficientPayment,
    InvalidPayment,
    NoAvailableShares,
    TooSoon,
    TransferFailed,
    ReentrantCall,
)

# Balance ledger and registry
from .book import ShareBook
from .registry import Property, PropertyRegistry

# Pricing
from .pricing import compute_share_value, rounding_loss

# Trading
from .trading import (
    PurchaseQuote,
    SaleQuote,
    compute_purchase,
    compute_sale,
)

# Rent and distribution
from .distribution import (
    DividendPayout,
    DistributionPlan,
    DistributionResult,
    required_rent,
    validate_rent_payment,
    compute_dividend_payouts,
)

# Lifecycle
from .lifecycle import LifecycleGate, RentUpdate

# Ledger
from .ledger import PropertyLedger

# Collaborators
from .adapters import (
    StaticAdministrators,
    InMemoryTransfer,
    ManualClock,
    SystemClock,
    CollectingSink,
)

# Configuration and logging
from .config import LedgerConfig, ConfigurationError
from .logging import setup_logging, get_logger

__all__ = [
    # Core
    'RENT_UPDATE_COOLDOWN', 'Identity', 'Holdings',
    'PropertyDetails', 'Notification', 'EventType',
    'AdminCapability', 'ValueTransfer', 'SupportsRollback', 'Clock', 'NotificationSink',
    'PropertyLedgerError', 'InvalidArgument', 'NotFound', 'Unauthorized', 'Obsolete',
    'InsufficientSupply', 'InsufficientBalance', 'InsufficientPayment', 'InvalidPayment',
    'NoAvailableShares', 'TooSoon', 'TransferFailed', 'ReentrantCall',
    # Balance ledger and registry
    'ShareBook', 'Property', 'PropertyRegistry',
    # Pricing
    'compute_share_value', 'rounding_loss',
    # Trading
    'PurchaseQuote', 'SaleQuote', 'compute_purchase', 'compute_sale',
    # Rent and distribution
    'DividendPayout', 'DistributionPlan', 'DistributionResult',
    'required_rent', 'validate_rent_payment', 'compute_dividend_payouts',
    # Lifecycle
    'LifecycleGate', 'RentUpdate',
    # Ledger
    'PropertyLedger',
    # Collaborators
    'StaticAdministrators', 'InMemoryTransfer', 'ManualClock', 'SystemClock', 'CollectingSink',
    # Configuration and logging
    'LedgerConfig', 'ConfigurationError', 'setup_logging', 'get_logger',
]

__version__ = '1.0.0'
