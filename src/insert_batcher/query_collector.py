"""
Query collector for dry runs.

In dry run mode the executor hands each assembled INSERT statement to a
collector instead of the database, so the statements can be inspected,
written to a file or summarised.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from insert_batcher.models import byte_size


class QueryCollector(ABC):
    """
    Abstract base class for query collectors.

    Examples:
        >>> class PrintingCollector(QueryCollector):
        ...     def add_query(self, query, metadata=None):
        ...         print(query)
        ...
        ...     def get_queries(self):
        ...         return []
    """

    @abstractmethod
    def add_query(self, query: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        """
        Add a query to the collector.

        Args:
            query: SQL statement that would have been executed
            metadata: Additional details about the statement (optional)
        """
        pass

    @abstractmethod
    def get_queries(self) -> List[Dict[str, Any]]:
        """
        Get all collected queries.

        Returns:
            List of collected queries, typically as dictionaries
        """
        pass


class ListQueryCollector(QueryCollector):
    """
    Query collector that keeps statements in a list.

    Each entry is a dictionary with ``query``, ``bytes`` and ``metadata`` keys.
    """

    def __init__(self) -> None:
        self.queries: List[Dict[str, Any]] = []

    def add_query(self, query: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        self.queries.append({
            "query": query,
            "bytes": byte_size(query),
            "metadata": metadata or {},
        })

    def get_queries(self) -> List[Dict[str, Any]]:
        return self.queries

    def clear(self) -> None:
        """Forget every collected query."""
        self.queries = []

    def get_stats(self) -> Dict[str, Any]:
        """
        Summarise the collected statements.

        Returns:
            Dictionary with the statement count, total and largest byte sizes
            and the number of value tuples across statements
        """
        sizes = [q["bytes"] for q in self.queries]
        return {
            "total_queries": len(self.queries),
            "total_bytes": sum(sizes),
            "max_bytes": max(sizes) if sizes else 0,
            "total_values": sum(q["metadata"].get("value_count", 0) for q in self.queries),
        }
