"""Split-route search.

Every candidate route has been quoted at every rung of the amount ladder. The
search picks up to three routes whose percents add up to 100 and whose pools
are pairwise disjoint (swapping through a pool moves its price, so a pool
cannot serve two legs of the same split), optimizing the summed gas-adjusted
quote: maximized for exact input, minimized for exact output.

The search is greedy per bucket. For each percent it only pairs the best
route at that percent with the first disjoint route of the complementary
bucket, and it only looks at three-way splits when a two-way split already
beat the single best route. Both shortcuts can miss a better split; they keep
the search linear-to-quadratic in the ladder size.
"""

from __future__ import annotations

import heapq
import itertools
from collections.abc import Callable, Sequence
from fractions import Fraction
from typing import TYPE_CHECKING

import structlog

from split_router.errors import UnsupportedSplitDegreeError
from split_router.metrics import DEFAULT_METRICS, MetricsSink, timed
from split_router.models.entities import Token, TradeType
from split_router.routing.types import RawQuote, Route, RouteWithValidQuote

if TYPE_CHECKING:
    from split_router.providers.base import GasModel

logger = structlog.get_logger()

# Best two-way candidates kept for logging
TOP_SPLITS_TRACKED = 5


def build_percent_to_quotes(
    percents: Sequence[int],
    routes_with_quotes: Sequence[tuple[Route, Sequence[RawQuote]]],
    gas_model: GasModel,
    quote_token: Token,
    trade_type: TradeType,
    metrics: MetricsSink = DEFAULT_METRICS,
) -> dict[int, list[RouteWithValidQuote]]:
    """Bucket valid quotes by ladder percent.

    Quote lists are aligned with `percents`. Quotes missing any field are
    dropped here; a route may therefore be absent from some buckets.

    Raises:
        ValueError: If a route's quote list does not match the ladder length
    """
    percent_to_quotes: dict[int, list[RouteWithValidQuote]] = {}
    dropped = 0

    with timed(metrics, "BuildRouteWithValidQuoteObjects"):
        for route, quotes in routes_with_quotes:
            if len(quotes) != len(percents):
                raise ValueError(
                    f"Quote list for {route} has {len(quotes)} entries, expected one per ladder rung ({len(percents)})"
                )
            for percent, raw_quote in zip(percents, quotes, strict=True):
                if not raw_quote.is_valid:
                    dropped += 1
                    logger.debug(
                        "dropping_invalid_quote",
                        route=str(route),
                        percent=percent,
                        amount=raw_quote.amount,
                    )
                    continue

                percent_to_quotes.setdefault(percent, []).append(
                    RouteWithValidQuote.from_raw_quote(
                        route=route,
                        percent=percent,
                        raw_quote=raw_quote,
                        gas_model=gas_model,
                        quote_token=quote_token,
                        trade_type=trade_type,
                    )
                )

    if dropped:
        logger.debug("invalid_quotes_dropped", count=dropped)
    return percent_to_quotes


class TopSplits:
    """Bounded collection of the best split candidates seen (diagnostics only)."""

    def __init__(self, trade_type: TradeType, size: int = TOP_SPLITS_TRACKED) -> None:
        self._sign = 1 if trade_type == TradeType.EXACT_INPUT else -1
        self._size = size
        self._heap: list[tuple[Fraction, int, list[RouteWithValidQuote]]] = []
        self._counter = itertools.count()

    def push(self, quote: Fraction, routes: list[RouteWithValidQuote]) -> None:
        # Min-heap on the signed score: the root is the worst kept candidate
        entry = (self._sign * quote, next(self._counter), routes)
        if len(self._heap) < self._size:
            heapq.heappush(self._heap, entry)
        elif entry[0] > self._heap[0][0]:
            heapq.heapreplace(self._heap, entry)

    def consume(self) -> list[tuple[Fraction, list[RouteWithValidQuote]]]:
        """Empty the collection, best candidate first."""
        ordered = sorted(self._heap, key=lambda entry: (-entry[0], entry[1]))
        self._heap = []
        return [(self._sign * score, routes) for score, _, routes in ordered]

    def __len__(self) -> int:
        return len(self._heap)


def find_first_route_not_using_used_pools(
    used_routes: Sequence[Route],
    candidate_route_quotes: Sequence[RouteWithValidQuote],
) -> RouteWithValidQuote | None:
    """First candidate (in priority order) sharing no pool with `used_routes`."""
    used_pools: set[str] = set()
    for route in used_routes:
        used_pools.update(route.pool_addresses)

    for route_quote in candidate_route_quotes:
        if used_pools.isdisjoint(route_quote.pool_addresses):
            return route_quote
    return None


class SplitOptimizer:
    """Finds the best 1/2/3-way split from bucketed route quotes.

    Args:
        trade_type: Exact input maximizes, exact output minimizes
        max_splits: Largest split degree to search. Reaching degree 4 is a
            configuration defect and raises UnsupportedSplitDegreeError.
        metrics: Metric sink for search timings
        by: Objective extracted from each route quote (gas-adjusted quote)
    """

    def __init__(
        self,
        trade_type: TradeType,
        max_splits: int = 3,
        metrics: MetricsSink = DEFAULT_METRICS,
        by: Callable[[RouteWithValidQuote], Fraction] = lambda rq: rq.quote_adjusted_for_gas,
    ) -> None:
        self.trade_type = trade_type
        self.max_splits = max_splits
        self.metrics = metrics
        self.by = by

    def is_better(self, candidate: Fraction, incumbent: Fraction) -> bool:
        """Strict comparison in the direction of the objective."""
        if self.trade_type == TradeType.EXACT_INPUT:
            return candidate > incumbent
        return candidate < incumbent

    def sort_quotes(
        self, percent_to_quotes: dict[int, list[RouteWithValidQuote]]
    ) -> dict[int, list[RouteWithValidQuote]]:
        """Sort every bucket best-first. Ties keep their input order."""
        descending = self.trade_type == TradeType.EXACT_INPUT
        return {
            percent: sorted(route_quotes, key=self.by, reverse=descending)
            for percent, route_quotes in percent_to_quotes.items()
            if route_quotes
        }

    def get_best_swap_route_by(
        self,
        percent_to_quotes: dict[int, list[RouteWithValidQuote]],
        percents: Sequence[int],
    ) -> list[RouteWithValidQuote] | None:
        """Search for the best split.

        Returns:
            Route quotes of the best split (percents sum to 100, pools
            disjoint), or None when no route has a valid quote at 100%.

        Raises:
            UnsupportedSplitDegreeError: If max_splits reaches 4
        """
        sorted_quotes = self.sort_quotes(percent_to_quotes)

        if 100 not in sorted_quotes:
            logger.info(
                "no_route_without_splits",
                quotes_per_percent={percent: len(quotes) for percent, quotes in sorted_quotes.items()},
            )
            return None

        best_swap = [sorted_quotes[100][0]]
        best_quote = self.by(best_swap[0])

        logger.info(
            "top_routes_with_1_split",
            top=[
                f"{float(self.by(rq)):.2f} [NoGas: {rq.quote}] [EstGas: {rq.gas_estimate}] "
                f"[TicksCrossed: {list(rq.initialized_ticks_crossed_list)}]: {rq.route}"
                for rq in sorted_quotes[100][:TOP_SPLITS_TRACKED]
            ],
        )

        for splits in range(2, self.max_splits + 1):
            best_quote, best_swap = self._search_splits(splits, sorted_quotes, percents, best_quote, best_swap)

        return best_swap

    def _search_splits(
        self,
        splits: int,
        sorted_quotes: dict[int, list[RouteWithValidQuote]],
        percents: Sequence[int],
        best_quote: Fraction,
        best_swap: list[RouteWithValidQuote],
    ) -> tuple[Fraction, list[RouteWithValidQuote]]:
        if splits == 2:
            with timed(self.metrics, "Split2Done"):
                return self._search_two_way(sorted_quotes, percents, best_quote, best_swap)
        if splits == 3:
            with timed(self.metrics, "Split3Done"):
                if len(best_swap) < 2:
                    logger.info("skipping_3_splits", reason="2 splits did not improve on a single route")
                    return best_quote, best_swap
                return self._search_three_way(sorted_quotes, percents, best_quote, best_swap)
        raise UnsupportedSplitDegreeError(f"{splits}-way splits are not supported (max 3)")

    def _search_two_way(
        self,
        sorted_quotes: dict[int, list[RouteWithValidQuote]],
        percents: Sequence[int],
        best_quote: Fraction,
        best_swap: list[RouteWithValidQuote],
    ) -> tuple[Fraction, list[RouteWithValidQuote]]:
        top_splits = TopSplits(self.trade_type)

        for percent_a in reversed(percents):
            # Small rungs may be unquotable (amount too small), leaving no bucket
            candidates_a = sorted_quotes.get(percent_a)
            if not candidates_a:
                continue
            route_quote_a = candidates_a[0]

            candidates_b = sorted_quotes.get(100 - percent_a)
            if not candidates_b:
                continue

            route_quote_b = find_first_route_not_using_used_pools([route_quote_a.route], candidates_b)
            if route_quote_b is None:
                continue

            new_quote = self.by(route_quote_a) + self.by(route_quote_b)
            top_splits.push(new_quote, [route_quote_a, route_quote_b])

            if self.is_better(new_quote, best_quote):
                best_quote = new_quote
                best_swap = [route_quote_a, route_quote_b]

        logger.info(
            "top_routes_with_2_splits",
            top=[
                f"{float(quote):.2f} ({', '.join(str(rq) for rq in routes)})"
                for quote, routes in top_splits.consume()
            ],
        )
        return best_quote, best_swap

    def _search_three_way(
        self,
        sorted_quotes: dict[int, list[RouteWithValidQuote]],
        percents: Sequence[int],
        best_quote: Fraction,
        best_swap: list[RouteWithValidQuote],
    ) -> tuple[Fraction, list[RouteWithValidQuote]]:
        for i in range(len(percents) - 1, -1, -1):
            percent_a = percents[i]
            candidates_a = sorted_quotes.get(percent_a)
            if not candidates_a:
                continue
            route_quote_a = candidates_a[0]
            remaining_percent = 100 - percent_a

            for j in range(i - 1, -1, -1):
                percent_b = percents[j]
                candidates_b = sorted_quotes.get(percent_b)
                if not candidates_b:
                    continue

                route_quote_b = find_first_route_not_using_used_pools([route_quote_a.route], candidates_b)
                if route_quote_b is None:
                    continue

                candidates_c = sorted_quotes.get(remaining_percent - percent_b)
                if not candidates_c:
                    continue

                route_quote_c = find_first_route_not_using_used_pools(
                    [route_quote_a.route, route_quote_b.route], candidates_c
                )
                if route_quote_c is None:
                    continue

                new_quote = self.by(route_quote_a) + self.by(route_quote_b) + self.by(route_quote_c)
                if self.is_better(new_quote, best_quote):
                    best_quote = new_quote
                    best_swap = [route_quote_a, route_quote_b, route_quote_c]

        return best_quote, best_swap


__all__ = [
    "SplitOptimizer",
    "TopSplits",
    "build_percent_to_quotes",
    "find_first_route_not_using_used_pools",
]
