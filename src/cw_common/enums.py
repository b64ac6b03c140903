"""Global enums: must match DB CHECK constraints exactly."""

from enum import Enum


class TransactionType(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    TRADE_PROFIT = "trade_profit"
    TRADE_LOSS = "trade_loss"
    POOL_STAKE = "pool_stake"
    POOL_UNSTAKE = "pool_unstake"
    ROI_PAYOUT = "roi_payout"
    REFERRAL_COMMISSION = "referral_commission"


class TransactionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class BalanceField(str, Enum):
    """Wallet buckets; values are the column names."""
    AVAILABLE = "available_balance"
    LOCKED = "locked_balance"
    PENDING = "pending_balance"


class PoolStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    CLOSED = "closed"


class StakeStatus(str, Enum):
    ACTIVE = "active"
    UNSTAKED = "unstaked"
    MATURED = "matured"


class CommissionStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"


class BotTier(str, Enum):
    ANCHOR = "anchor"
    VECTOR = "vector"
    KINETIC = "kinetic"
    HORIZON = "horizon"


class MarketSentiment(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class Volatility(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class NotificationType(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    STAKE = "stake"
    UNSTAKE = "unstake"
    REFERRAL = "referral"
    YIELD = "yield"
    SYSTEM = "system"


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"
