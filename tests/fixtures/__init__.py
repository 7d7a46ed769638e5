"""
Test fixtures for AgencyBrain.

Builders for curriculum rows, assignments and auth tokens shared by the API
and service tests.
"""

from .factories import (
    SAMPLE_QUIZ,
    SAMPLE_SEGMENTS,
    create_challenge_product,
    create_sales_assignment,
    create_sales_curriculum,
    make_supabase_jwt,
    today_in,
)

__all__ = [
    "SAMPLE_QUIZ",
    "SAMPLE_SEGMENTS",
    "create_challenge_product",
    "create_sales_assignment",
    "create_sales_curriculum",
    "make_supabase_jwt",
    "today_in",
]
