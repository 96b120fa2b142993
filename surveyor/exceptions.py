"""Exception hierarchy for the lander simulation.

Configuration problems are raised once, at construction, and are fatal:
nothing downstream is allowed to run with an undefined allocator or an
invalid mass model. Numerical blow-ups in the integrator are treated the
same way. Ephemeris lookup failures are recoverable and are handled by the
environment model.
"""


class SurveyorError(Exception):
    """Base class for all simulation errors."""


class ConfigurationError(SurveyorError, ValueError):
    """Invalid configuration detected at startup."""


class NumericalInstabilityError(SurveyorError, ArithmeticError):
    """Integrator produced a non-finite state."""


class EphemerisLookupError(SurveyorError, LookupError):
    """An ephemeris source could not provide a body state for an epoch."""
