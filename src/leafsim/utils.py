"""
Utilities: Includes error kinds and input-validation helpers shared by the leafsim modules
"""

import numpy as np

def check_finite(**kwargs):
    """
    Raise a ValueError naming the first keyword argument whose value is not finite.

    Parameters
    ----------
    kwargs : scalar or array_like
        Named values to check, e.g. check_finite(T=T, p_ups=p_ups)

    Raises
    ------
    ValueError: If any value is NaN or infinite.
    """
    for name, value in kwargs.items():
        if not np.all(np.isfinite(value)):
            raise ValueError(f"'{name}' must be finite, got {value}")

def check_positive(**kwargs):
    """Raise a ValueError if any named value is not strictly positive (or not finite)."""
    check_finite(**kwargs)
    for name, value in kwargs.items():
        if np.any(np.asarray(value) <= 0):
            raise ValueError(f"'{name}' must be strictly positive, got {value}")

def check_nonnegative(**kwargs):
    """Raise a ValueError if any named value is negative (or not finite)."""
    check_finite(**kwargs)
    for name, value in kwargs.items():
        if np.any(np.asarray(value) < 0):
            raise ValueError(f"'{name}' cannot be negative, got {value}")

def check_same_length(**kwargs):
    """
    Check that array-like arguments all share the same length.

    Raises
    ------
    ValueError: If the array-like arguments have different lengths.

    Example
    -------
    >>> check_same_length(APAR=[1000., 200.], g_bw=[3., 3.])
    2
    >>> check_same_length(APAR=[1000., 200.], g_bw=[3.])
    Traceback (most recent call last):
    ...
    ValueError: Per light bin arrays must have the same length, but 'g_bw' has length 1 while others have length 2
    """
    length = None
    for arg_name, value in kwargs.items():
        if length is None:
            length = len(value)
        elif length != len(value):
            raise ValueError(f"Per light bin arrays must have the same length, but '{arg_name}' has length {len(value)} while others have length {length}")
    return length


class SolveError(Exception):
    """Custom exception for solver errors."""
    pass
