"""
Binomial probabilities used by the localization scores.

PhosphoRS probabilities are computed with decimal arithmetic in an explicit
decimal.Context so that very small probabilities do not underflow. AScore
works with floats through scipy.
"""

import logging
import math
import sys
from decimal import Context, Decimal
from typing import Optional

from scipy.stats import binom

from .constants import DEFAULT_PRECISION
from .exceptions import InternalConsistencyError

logger = logging.getLogger(__name__)

ONE = Decimal(1)
ZERO = Decimal(0)

# extra digits carried while summing binomial terms
GUARD_DIGITS = 10


def make_context(precision: Optional[int] = None) -> Context:
    """Decimal context with the given number of significant digits."""
    return Context(prec=precision or DEFAULT_PRECISION)


def resolution_limit(context: Context) -> Decimal:
    """Smallest probability resolved by the context: 10^-precision."""
    return ONE.scaleb(-context.prec, context)


def to_decimal(value, context: Context) -> Decimal:
    if isinstance(value, Decimal):
        return context.plus(value)
    if isinstance(value, int):
        return context.create_decimal(value)
    return context.create_decimal_from_float(float(value))


def binomial_tail(k: int, n: int, p, context: Context) -> Decimal:
    """
    Descending cumulative probability P(X >= k) for X ~ Binomial(n, p).

    k = 0 gives exactly 1. The upper tail is summed term by term so that
    probabilities far below the resolution limit keep their significant
    digits. The sum runs with GUARD_DIGITS extra digits and is rounded to
    the context at the end.

    Args:
        k: Number of successes (matched ions)
        n: Number of trials (expected ions)
        p: Probability of success of a single trial
        context: Decimal context of the computation

    Returns:
        The probability as a Decimal rounded to the context
    """
    if k <= 0:
        return ONE
    if k > n:
        return ZERO

    p_decimal = to_decimal(p, context)
    if p_decimal >= ONE:
        return ONE
    if p_decimal <= ZERO:
        return ZERO

    working = Context(prec=context.prec + GUARD_DIGITS)
    q_decimal = working.subtract(ONE, p_decimal)

    total = ZERO
    for i in range(k, n + 1):
        combinations = working.create_decimal(math.comb(n, i))
        term = working.multiply(combinations, working.power(p_decimal, i))
        total = working.add(total, working.multiply(term, working.power(q_decimal, n - i)))
    return context.plus(total)


def check_probability(probability: Decimal, context: Context) -> Decimal:
    """
    Verify that a probability lies in [0, 1] up to the resolution limit.

    Values off by at most the resolution limit are clamped into [0, 1].

    Args:
        probability: The probability to check
        context: Decimal context the probability was computed in

    Returns:
        The clamped probability

    Raises:
        InternalConsistencyError: If the probability is off by more than the
            resolution limit
    """
    limit = resolution_limit(context)
    # bounds need one more digit than the context carries
    exact = Context(prec=2 * context.prec + 2)
    lower = exact.minus(limit)
    upper = exact.add(ONE, limit)
    if probability < lower:
        raise InternalConsistencyError(f"Probability {probability} < 0.")
    if probability > upper:
        raise InternalConsistencyError(f"Probability {probability} > 1.")
    if probability < ZERO:
        return ZERO
    if probability > ONE:
        return ONE
    return probability


def binomial_tail_float(k: int, n: int, p: float) -> float:
    """P(X >= k) for X ~ Binomial(n, p) in double precision."""
    if k <= 0:
        return 1.0
    return float(binom.sf(k - 1, n, p))


def phred_score(probability: float) -> float:
    """-10 log10(P), P floored at the smallest normal float."""
    if probability <= sys.float_info.min:
        probability = sys.float_info.min
    return -10.0 * math.log10(probability)
