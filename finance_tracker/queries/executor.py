"""
Query Execution Engine

DESIGN DECISION: Reports never reach into a store directly.
They describe what they want as a LedgerQuery and this engine
executes it against one account's records.

GUARANTEES:
- Only returns data that is actually in the ledger
- Clear "no data found" if nothing matches
- Errors are captured in the result, never raised
"""

from decimal import Decimal
from typing import Optional

from finance_tracker.ledger.account import Account
from finance_tracker.models.ledger import (
    LedgerQuery,
    QueryResult,
    TransactionRecord,
    format_amount,
)


class LedgerQueryExecutor:
    """Executes structured queries against an account's transactions."""

    def __init__(self, account: Account):
        self._account = account

    def execute(self, query: LedgerQuery) -> QueryResult:
        """Execute a structured query and return results."""
        try:
            if query.query_type == "aggregate":
                return self._execute_aggregate(query)
            return self._execute_list(query)
        except Exception as e:
            return QueryResult(
                success=False,
                error_message=str(e),
                data_found=False,
                result_count=0,
                query_description=f"Query failed: {str(e)}",
            )

    def _matching(self, query: LedgerQuery) -> list[TransactionRecord]:
        records = []
        category = query.category_filter.lower() if query.category_filter else None
        for record in self._account.all_records():
            if query.kind_filter and record.kind is not query.kind_filter:
                continue
            if category and record.category.lower() != category:
                continue
            records.append(record)
        return records

    def _execute_list(self, query: LedgerQuery) -> QueryResult:
        """Execute a list query."""
        records = self._matching(query)[:query.limit]
        results = [self._record_to_dict(record) for record in records]

        desc_parts = [f"Listing transactions of {self._account.name}"]
        desc_parts.extend(self._filter_parts(query))

        return QueryResult(
            success=True,
            data_found=len(results) > 0,
            result_count=len(results),
            results=results,
            query_description=" | ".join(desc_parts),
        )

    def _execute_aggregate(self, query: LedgerQuery) -> QueryResult:
        """Execute an aggregate query (sum, count, average, min, max)."""
        records = self._matching(query)

        if not records:
            return QueryResult(
                success=True,
                data_found=False,
                result_count=0,
                query_description="No transactions found for aggregation",
            )

        aggregation_result = self._aggregate(
            [record.amount for record in records],
            query.aggregation_type,
        )

        if query.group_by:
            aggregation_result["breakdown"] = self._grouped_aggregate(
                records, query.group_by, query.aggregation_type
            )

        desc_parts = [f"Calculating {query.aggregation_type or 'sum'}"]
        desc_parts.extend(self._filter_parts(query))
        if query.group_by:
            desc_parts.append(f"grouped by {query.group_by}")

        return QueryResult(
            success=True,
            data_found=True,
            result_count=len(records),
            aggregation_result=aggregation_result,
            query_description=" ".join(desc_parts),
        )

    def _aggregate(self, amounts: list[Decimal], aggregation_type: Optional[str]) -> dict:
        if aggregation_type == "count":
            return {"count": len(amounts)}
        if aggregation_type == "average":
            return {
                "average_amount": sum(amounts) / len(amounts),
                "transaction_count": len(amounts),
            }
        if aggregation_type == "min":
            return {"minimum_amount": min(amounts)}
        if aggregation_type == "max":
            return {"maximum_amount": max(amounts)}
        return {
            "total_amount": sum(amounts),
            "transaction_count": len(amounts),
        }

    def _grouped_aggregate(
        self,
        records: list[TransactionRecord],
        group_by: str,
        aggregation_type: Optional[str],
    ) -> dict:
        """Calculate aggregation grouped by a field."""
        groups: dict[str, list[Decimal]] = {}
        for record in records:
            key = record.kind.value if group_by == "kind" else record.category
            groups.setdefault(key, []).append(record.amount)

        result = {}
        for key, amounts in groups.items():
            if aggregation_type == "count":
                result[key] = len(amounts)
            elif aggregation_type == "average":
                result[key] = sum(amounts) / len(amounts)
            elif aggregation_type == "min":
                result[key] = min(amounts)
            elif aggregation_type == "max":
                result[key] = max(amounts)
            else:  # Default to sum
                result[key] = sum(amounts)
        return result

    def _filter_parts(self, query: LedgerQuery) -> list[str]:
        parts = []
        if query.kind_filter:
            parts.append(f"kind: {query.kind_filter.value}")
        if query.category_filter:
            parts.append(f"category: {query.category_filter}")
        return parts

    def _record_to_dict(self, record: TransactionRecord) -> dict:
        """Convert a record to a dictionary for results."""
        return {
            "kind": record.kind.value,
            "amount": format_amount(record.amount),
            "category": record.category,
            "date": record.date,
            "note": record.note,
        }
