"""Loyalty ledger exceptions."""


class BaseError(Exception):
    """
    Structured error with a stable code and JSON-friendly payload.

    Subclasses declare ``_default_messages`` keyed by code.
    """

    _default_messages: dict[str, str] = {}

    def __init__(self, code: str, message: str | None = None, **data):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(f"[{code}] {self.message}")

    def as_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "data": self.data}


class LedgerError(BaseError):
    """
    Structured exception for loyalty ledger operations.

    Every expected business condition is raised as a LedgerError with one of
    the codes below; callers reject the operation instead of crashing.
    Database failures are not wrapped.

    Usage:
        try:
            LedgerService.redeem_reward("CUST-001", reward_id, 2)
        except LedgerError as e:
            if e.code == "ALREADY_REDEEMED":
                show_already_used()
    """

    _default_messages = {
        "CUSTOMER_NOT_FOUND": "Customer not found",
        "MERCHANT_NOT_FOUND": "Merchant not found",
        "REWARD_NOT_FOUND": "Reward not found",
        "TIER_NOT_FOUND": "Tier not found",
        "BENEFIT_NOT_FOUND": "Benefit not found",
        "OWNERSHIP_MISMATCH": "Customer does not belong to this merchant",
        "ALREADY_REDEEMED": "Already redeemed",
        "INVALID_INPUT": "Invalid input",
        "NOT_APPLICABLE": "Operation not applicable to this loyalty program",
        "REWARD_LOCKED": "Reward is not yet available",
        "REWARD_EXPIRED": "Reward has expired",
    }

    _kinds = {
        "CUSTOMER_NOT_FOUND": "NotFound",
        "MERCHANT_NOT_FOUND": "NotFound",
        "REWARD_NOT_FOUND": "NotFound",
        "TIER_NOT_FOUND": "NotFound",
        "BENEFIT_NOT_FOUND": "NotFound",
        "OWNERSHIP_MISMATCH": "OwnershipMismatch",
        "ALREADY_REDEEMED": "AlreadyRedeemed",
        "INVALID_INPUT": "InvalidInput",
        "NOT_APPLICABLE": "NotApplicable",
        "REWARD_LOCKED": "NotApplicable",
        "REWARD_EXPIRED": "NotApplicable",
    }

    @property
    def kind(self) -> str:
        """Taxonomy bucket for the code (NotFound, AlreadyRedeemed, ...)."""
        return self._kinds.get(self.code, "NotApplicable")
