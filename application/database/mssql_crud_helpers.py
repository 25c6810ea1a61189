from contextlib import closing
from typing import Any, Dict, Iterator, List, Sequence


def placeholders(values: Sequence[Any]) -> str:
    """Build a parenthesised qmark list for an IN clause: (?, ?, ?)."""
    if not values:
        raise ValueError("IN clause needs at least one value")
    return "(" + ", ".join(["?" for _ in values]) + ")"


def fetch_all(conn, query: str, params: Sequence[Any] = ()) -> List[Dict]:
    """Run a query and return every row as a dict keyed by column name."""
    with closing(conn.cursor()) as cursor:
        cursor.execute(query, tuple(params))
        records = cursor.fetchall()
        column_names = [column[0] for column in cursor.description]
        return [dict(zip(column_names, row)) for row in records]


def iter_records(conn, query: str, params: Sequence[Any] = ()) -> Iterator[Dict]:
    """
    Stream rows as dicts. The cursor stays open until the generator is
    exhausted or closed, so the caller must consume it before issuing another
    query on the same connection.
    """
    with closing(conn.cursor()) as cursor:
        cursor.execute(query, tuple(params))
        column_names = [column[0] for column in cursor.description]
        for row in cursor:
            yield dict(zip(column_names, row))
