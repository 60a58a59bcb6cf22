"""
Identifier canonicalization.

Every name that is stored in a metadata snapshot, and every name read from a
runtime violation, goes through `canonical_identifier` so both sides compare equal.
"""


def canonical_identifier(name: str | None) -> str | None:
    """
    Return the canonical form of a database identifier.

    - None stays None.
    - str subclasses (e.g. SQLAlchemy's quoted_name) become plain str.
    - A fully double-quoted identifier is unquoted, with "" unescaped to ".

    Case is preserved: PostgreSQL reports identifiers exactly as stored, both in the
    catalog and in error fields.
    """
    if name is None:
        return None
    name = str(name)
    if len(name) >= 2 and name[0] == '"' and name[-1] == '"':
        name = name[1:-1].replace('""', '"')
    return name