"""Calculator exceptions.

All derive from ValueError so callers that only care about "bad request"
can catch the base class.
"""


class CalculatorError(ValueError):
    """Base exception for the finance calculator"""

    pass


class ValidationError(CalculatorError):
    """Caller input violates a documented constraint (amount range, term, required field)"""

    pass


class RateBandNotFoundError(CalculatorError):
    """Principal falls outside every configured rate band"""

    pass


class LoanAmountNotFoundError(CalculatorError):
    """No rate band produces a loan amount inside its own range"""

    pass


class RateConvergenceError(CalculatorError):
    """RATE iteration did not converge and strict convergence is enabled"""

    pass
