"""
Database compatibility helpers for SQLite and PostgreSQL.
"""
from sqlalchemy import func, extract
from pluridesk.database import is_sqlite


def extract_year_month(column):
    """Extract YYYY-MM from a date column."""
    if is_sqlite:
        return func.strftime("%Y-%m", column)
    return func.to_char(column, "YYYY-MM")


def year_equals(column, year: int):
    """Filter: date column's year equals given year."""
    if is_sqlite:
        return func.strftime("%Y", column) == str(year)
    return extract("year", column) == year
