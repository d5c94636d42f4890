from __future__ import annotations

from policy.types import FailureCategory, FailureClassification

SMART_ACCOUNT_UPGRADE_PHRASE = "Account upgraded to unsupported contract"
GAS_LIMIT_PHRASE = "gas limit too high"

_RULES = [
    (
        SMART_ACCOUNT_UPGRADE_PHRASE,
        FailureCategory.SMART_ACCOUNT_UPGRADE_REQUIRED,
        "Need to disable smart account feature",
        [
            "Open the wallet and go to the account details.",
            "Turn off the smart account for this chain (requires a gas fee).",
            "Return and retry the batch; the account is upgraded again automatically.",
        ],
    ),
    (
        GAS_LIMIT_PHRASE,
        FailureCategory.GAS_LIMIT_EXCEEDED,
        "Gas Limit Exceeded",
        [
            "Some calls in the batch need unusually high gas (often special token contracts).",
            "Remove those calls and retry, or split the batch into smaller ones.",
        ],
    ),
]


def classify_failure(message: str | None) -> FailureClassification:
    """
    Map a provider error message to a remediation category (first match wins).
    """
    raw = message or ""
    for phrase, category, title, steps in _RULES:
        if phrase in raw:
            return FailureClassification(
                category=category,
                raw_message=raw,
                title=title,
                remediation=list(steps),
            )
    return FailureClassification(category=FailureCategory.UNCLASSIFIED, raw_message=raw)
