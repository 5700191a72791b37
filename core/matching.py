"""
Bank transaction to expense record matching.
Amounts must agree within a fixed absolute tolerance and descriptions must
overlap by case-insensitive containment in either direction.

Two strategies are available:
- first_match: each transaction takes the first qualifying expense in input
  order. Expenses are never consumed, so several transactions may match one.
- one_to_one: greedy in transaction order, each expense satisfies at most one
  transaction.
"""
from decimal import Decimal
from typing import List, Optional, Sequence, Set

import Levenshtein

from core.config import get_settings
from core.exceptions import ConfigurationError
from core.logger import setup_logger
from core.schema import BankTransaction, ExpenseRecord, ReconciliationSummary

logger = setup_logger(__name__)

STRATEGIES = ("first_match", "one_to_one")


def amounts_match(a: Decimal, b: Decimal, tolerance: Optional[Decimal] = None) -> bool:
    """
    Check whether two amounts are equal within tolerance.

    Args:
        a: First amount
        b: Second amount
        tolerance: Absolute tolerance (defaults to configured AMOUNT_TOLERANCE)

    Returns:
        True if abs(a - b) < tolerance
    """
    if tolerance is None:
        tolerance = get_settings().amount_tolerance
    return abs(a - b) < tolerance


def calculate_similarity(s1: str, s2: str) -> float:
    """
    Calculate Levenshtein similarity ratio between two lowercased strings.

    Returns:
        Similarity score (0.0 to 1.0)
    """
    if not s1 or not s2:
        return 0.0
    return Levenshtein.ratio(s1.lower(), s2.lower())


def descriptions_match(
    a: str,
    b: str,
    min_length: Optional[int] = None,
    similarity_threshold: Optional[float] = None,
) -> bool:
    """
    Check whether two descriptions refer to the same payee.

    Containment is checked both ways after lowercasing. An empty description
    is contained in everything and therefore always matches, unless a
    minimum length is configured.

    Args:
        a: First description
        b: Second description
        min_length: Shortest description length for containment to count
        similarity_threshold: Levenshtein ratio accepted when containment fails

    Returns:
        True if the descriptions match
    """
    settings = get_settings()
    if min_length is None:
        min_length = settings.min_description_length
    if similarity_threshold is None:
        similarity_threshold = settings.description_similarity_threshold

    a_low = a.lower()
    b_low = b.lower()

    if (a_low in b_low or b_low in a_low) and min(len(a_low), len(b_low)) >= min_length:
        return True

    if similarity_threshold is not None:
        return calculate_similarity(a_low, b_low) >= similarity_threshold

    return False


def is_match(
    transaction: BankTransaction,
    expense: ExpenseRecord,
    tolerance: Optional[Decimal] = None,
    min_length: Optional[int] = None,
    similarity_threshold: Optional[float] = None,
) -> bool:
    """Both predicates: amount within tolerance and overlapping descriptions."""
    return (
        amounts_match(expense.amount, transaction.amount, tolerance)
        and descriptions_match(expense.description, transaction.description, min_length, similarity_threshold)
    )


def find_match(
    transaction: BankTransaction,
    expenses: Sequence[ExpenseRecord],
    tolerance: Optional[Decimal] = None,
    min_length: Optional[int] = None,
    similarity_threshold: Optional[float] = None,
    exclude: Optional[Set[str]] = None,
) -> Optional[ExpenseRecord]:
    """
    Find the first expense record matching a bank transaction.

    Args:
        transaction: Bank transaction to look up
        expenses: Expense records, scanned in order
        tolerance: Absolute amount tolerance
        min_length: Minimum description length for containment
        similarity_threshold: Optional Levenshtein fallback
        exclude: Expense ids that may not be used

    Returns:
        First matching expense record, or None
    """
    for expense in expenses:
        if exclude and expense.id in exclude:
            continue
        if is_match(transaction, expense, tolerance, min_length, similarity_threshold):
            return expense
    return None


def classify_transactions(
    transactions: Sequence[BankTransaction],
    expenses: Sequence[ExpenseRecord],
    tolerance: Optional[Decimal] = None,
    strategy: Optional[str] = None,
    min_description_length: Optional[int] = None,
    similarity_threshold: Optional[float] = None,
) -> List[BankTransaction]:
    """
    Classify every bank transaction as reported or unreported.

    Inputs are not modified. Any incoming reported flag is ignored and
    recomputed against the full expense batch.

    Args:
        transactions: Current bank batch
        expenses: Current expense batch
        tolerance: Absolute amount tolerance (defaults to AMOUNT_TOLERANCE)
        strategy: "first_match" or "one_to_one" (defaults to MATCHING_STRATEGY)
        min_description_length: Defaults to MIN_DESCRIPTION_LENGTH
        similarity_threshold: Defaults to DESCRIPTION_SIMILARITY_THRESHOLD

    Returns:
        New list of transactions in input order with reported set

    Raises:
        ConfigurationError: If strategy is unknown
    """
    settings = get_settings()
    if tolerance is None:
        tolerance = settings.amount_tolerance
    strategy = strategy or settings.matching_strategy

    if strategy not in STRATEGIES:
        raise ConfigurationError(
            f"Unknown matching strategy: {strategy}",
            details={"strategy": strategy, "available": list(STRATEGIES)}
        )

    consumed: Optional[Set[str]] = set() if strategy == "one_to_one" else None

    classified = []
    for txn in transactions:
        match = find_match(
            txn, expenses, tolerance, min_description_length, similarity_threshold, exclude=consumed
        )
        if match is not None:
            logger.debug(f"{txn.id} matched {match.id} ('{txn.description}' ~ '{match.description}')")
            if consumed is not None:
                consumed.add(match.id)
        classified.append(txn.model_copy(update={"reported": match is not None}))

    summary = summarize(classified)
    logger.info(
        f"Classified {summary.total} transactions against {len(expenses)} expenses "
        f"({strategy}): {summary.reported} reported, {summary.unreported} unreported"
    )

    return classified


def unreported(transactions: Sequence[BankTransaction]) -> List[BankTransaction]:
    """Transactions with no matching expense, in input order."""
    return [txn for txn in transactions if not txn.reported]


def summarize(transactions: Sequence[BankTransaction]) -> ReconciliationSummary:
    """
    Build counts over a classified batch.

    Args:
        transactions: Classified bank transactions

    Returns:
        Summary with reported/unreported counts and the unreported total
    """
    missing = unreported(transactions)
    return ReconciliationSummary(
        total=len(transactions),
        reported=len(transactions) - len(missing),
        unreported=len(missing),
        unreported_amount=sum((txn.amount for txn in missing), Decimal("0")),
    )
