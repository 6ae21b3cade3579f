"""Query package — dynamic SQL predicate assembly.

Files:
  builder.py  — QueryBuilder and its condition variants (WHERE / GROUP BY / ORDER BY / LIMIT / OFFSET)

Rule: only allow-listed column names and static SQL reach the builder as text.
      Every caller-supplied value travels as a positional argument.
"""
from app.query.builder import (
    Condition,
    Equal,
    Like,
    Max,
    Min,
    OrderBy,
    QueryBuilder,
    Range,
)

__all__ = ["Condition", "Equal", "Like", "Max", "Min", "OrderBy", "QueryBuilder", "Range"]
