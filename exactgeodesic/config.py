"""
Process-wide settings for exactgeodesic.

The inverse solver caps its Newton/bisection loop; with double precision the
estimate at the cap already meets the accuracy target, so by default the loop
simply exits. The convergence policy allows callers to be told about it instead.
"""

__all__ = ['get_convergence_policy', 'set_convergence_policy']

from typing import Literal

_CONVERGENCE_POLICIES = ('ignore', 'warn', 'raise')

# Declares how the inverse solver treats an exhausted iteration budget
convergence_policy = 'ignore'


def set_convergence_policy(policy: Literal['ignore', 'warn', 'raise']):
    """
    Set the global convergence failure policy.

    Args:
        policy:
            'ignore' returns the best estimate silently, 'warn' logs a warning
            (once per message) and 'raise' raises ConvergenceError
    """
    global convergence_policy

    if policy not in _CONVERGENCE_POLICIES:
        raise ValueError(f"Unknown policy '{policy}'. Options: {list(_CONVERGENCE_POLICIES)}")

    convergence_policy = policy


def get_convergence_policy() -> str:
    """Returns the active convergence failure policy"""
    return convergence_policy
