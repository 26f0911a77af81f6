"""Statistical tests over ad segments."""

from .hypothesis_tests import (
    two_proportion_p_value,
    bonferroni,
    pairwise_proportion_test,
    age_conversion_test,
    cpa_group_test,
)

__all__ = [
    "two_proportion_p_value",
    "bonferroni",
    "pairwise_proportion_test",
    "age_conversion_test",
    "cpa_group_test",
]
