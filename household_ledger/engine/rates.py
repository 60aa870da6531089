"""
Rate Graph Builder & Resolver

Answers "1 unit of X = ? units of Y" even when no direct quote exists,
by treating quotes as edges of a currency graph and searching it.

CONSTRUCTION:
1. Drop invalid quotes (rate not strictly positive and finite, a rate
   so small its inverse overflows, or a quote of a currency against
   itself).
2. Keep only the latest quote per UNORDERED currency pair
   (ties go to the later arrival).
3. For each kept quote (base=B, quote=Q, rate=r) add two edges:
       Q -> B  weight r      (1 Q = r B)
       B -> Q  weight 1/r    (1 B = 1/r Q)

RESOLUTION:
Breadth-first search from the source, multiplying weights along the
way. The factor returned is the one of the FIRST path that reaches the
target, i.e. a fewest-hops path, not a best-rate path.

If no path exists, resolution returns UNCONVERTIBLE (numerically 0).
Callers must check for it before multiplying.
"""

import math
from collections import deque
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Optional

from household_ledger.diagnostics import IssueCollector
from household_ledger.engine.timestamps import timestamp_key
from household_ledger.models.diagnostics import IssueBuilder
from household_ledger.models.records import RateQuote


UNCONVERTIBLE: float = 0.0


def is_convertible(factor: float) -> bool:
    """True unless `factor` is the UNCONVERTIBLE sentinel."""
    return factor != UNCONVERTIBLE


class RateGraph:
    """
    Directed currency graph: code -> [(neighbor, weight), ...].
    
    Built fresh from a quote set for each computation and never
    mutated afterwards.
    """
    
    def __init__(self):
        self._edges: dict[str, list[tuple[str, float]]] = {}
    
    def add_edge(self, source: str, target: str, weight: float) -> None:
        """Add one directed edge: 1 `source` = `weight` `target`."""
        self._edges.setdefault(source, []).append((target, weight))
        self._edges.setdefault(target, [])
    
    def neighbors(self, currency: str) -> list[tuple[str, float]]:
        """Outgoing edges of a currency, in insertion order."""
        return list(self._edges.get(currency, ()))
    
    def currencies(self) -> set[str]:
        """Every currency that appears in at least one valid quote."""
        return set(self._edges)
    
    def __contains__(self, currency: str) -> bool:
        return currency in self._edges
    
    def __len__(self) -> int:
        return len(self._edges)
    
    def reachable_from(self, currency: str) -> set[str]:
        """Currencies with a path from `currency` (itself included)."""
        seen = {currency}
        queue = deque([currency])
        while queue:
            current = queue.popleft()
            for neighbor, _ in self._edges.get(current, ()):
                if neighbor not in seen:
                    seen.add(neighbor)
                    queue.append(neighbor)
        return seen


def _invalid_reason(quote: RateQuote) -> Optional[str]:
    if quote.base_currency == quote.quote_currency:
        return "quote of a currency against itself"
    if math.isnan(quote.rate) or math.isinf(quote.rate):
        return "rate is not finite"
    if quote.rate <= 0:
        return "rate is not strictly positive"
    if math.isinf(1.0 / quote.rate):
        return "inverse rate is not finite"
    return None


def latest_quotes(
    quotes: Iterable[RateQuote],
    collector: Optional[IssueCollector] = None,
    formats: Optional[Sequence[str]] = None,
) -> list[RateQuote]:
    """
    Valid quotes, deduplicated to the latest one per unordered pair.
    
    Pairs are listed in the order they first appear.
    """
    winners: dict[frozenset[str], tuple[datetime, RateQuote]] = {}
    
    for quote in quotes:
        reason = _invalid_reason(quote)
        if reason is not None:
            if collector is not None:
                collector.record(IssueBuilder.invalid_quote(
                    quote.base_currency,
                    quote.quote_currency,
                    quote.rate,
                    reason,
                ))
            continue
        
        key = timestamp_key(
            quote.timestamp,
            f"quote {quote.quote_currency}->{quote.base_currency}",
            collector,
            formats,
        )
        current = winners.get(quote.pair)
        if current is None or key >= current[0]:
            winners[quote.pair] = (key, quote)
    
    return [quote for _, quote in winners.values()]


def build_graph(
    quotes: Iterable[RateQuote],
    collector: Optional[IssueCollector] = None,
    formats: Optional[Sequence[str]] = None,
) -> RateGraph:
    """Build the currency graph from a set of quotes."""
    graph = RateGraph()
    for quote in latest_quotes(quotes, collector, formats):
        graph.add_edge(quote.quote_currency, quote.base_currency, quote.rate)
        graph.add_edge(quote.base_currency, quote.quote_currency, 1.0 / quote.rate)
    return graph


def resolve(graph: RateGraph, source: str, target: str) -> float:
    """
    Units of `target` per unit of `source`.
    
    Returns 1 for identical codes (even if neither is quoted), the
    factor of the first path BFS finds otherwise, or UNCONVERTIBLE.
    """
    if source == target:
        return 1.0
    if source not in graph or target not in graph:
        return UNCONVERTIBLE
    
    visited = {source}
    queue = deque([(source, 1.0)])
    while queue:
        current, factor = queue.popleft()
        for neighbor, weight in graph.neighbors(current):
            if neighbor in visited:
                continue
            reached = factor * weight
            if neighbor == target:
                return reached
            visited.add(neighbor)
            queue.append((neighbor, reached))
    
    return UNCONVERTIBLE


class RateResolver:
    """
    Memoizing wrapper around `resolve()` for one aggregation pass.
    
    The quote set cannot change mid-computation, so each (source, target)
    pair is searched at most once. Discard the resolver with the result.
    """
    
    def __init__(self, graph: RateGraph):
        self._graph = graph
        self._cache: dict[tuple[str, str], float] = {}
    
    @classmethod
    def from_quotes(
        cls,
        quotes: Iterable[RateQuote],
        collector: Optional[IssueCollector] = None,
        formats: Optional[Sequence[str]] = None,
    ) -> "RateResolver":
        return cls(build_graph(quotes, collector, formats))
    
    @property
    def graph(self) -> RateGraph:
        return self._graph
    
    def factor(self, source: str, target: str) -> float:
        """Cached `resolve(graph, source, target)`."""
        key = (source, target)
        if key not in self._cache:
            self._cache[key] = resolve(self._graph, source, target)
        return self._cache[key]
    
    def convert(self, amount: float, source: str, target: str) -> Optional[float]:
        """`amount` in `target`, or None when there is no path."""
        factor = self.factor(source, target)
        if not is_convertible(factor):
            return None
        return amount * factor
