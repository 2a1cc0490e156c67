"""
Constants shared across the package.
"""

# Marks an unobserved (person, item) cell in a wide response matrix.
MISSING_VALUE = -1

# Relative tolerance for sum-to-zero checks, scaled by max(1, sum of |x|).
SUM_TO_ZERO_ATOL = 1e-8
