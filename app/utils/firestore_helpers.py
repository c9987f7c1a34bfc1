"""
Firestore query helpers.

firebase_admin still accepts positional where() arguments; the keyword
filter API only adds a deprecation warning difference, so queries go through
this single helper and can be switched in one place.
"""


def where_filter(query, field_path: str, op_string: str, value):
    """
    Apply one where-clause to a collection or query.

    Usage:
        query = where_filter(collection, "status", "in", ["open", "in_progress"])
        query = where_filter(query, "resolved_at", ">=", since)
    """
    return query.where(field_path, op_string, value)
