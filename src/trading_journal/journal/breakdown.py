"""Hierarchical breakdown of trades for drill-down and heatmap views.

Trades are grouped through six fixed dimensions:

    HTF -> PD-array presence -> PD-array type -> session -> LTF -> tag combo

Every node carries aggregated :class:`BaseStats`.  Missing values group
under a sentinel label (``"N/A"``, ``"No Confluences"``) so that no
trade is ever dropped.

The heatmap is built by a separate, coarser grouping: one row per
``(HTF, PD array)`` pair, one column per LTF, each cell summed over all
sessions and tag combos.  Rows and columns are ordered coarsest
timeframe first; labels the timeframe table does not know go last in
the order they were first seen.

Usage::

    aggregator = BreakdownAggregator()
    result = aggregator.build(trades)
    daily = result.tree.children["Daily"]
    cell = result.heatmap.cell("Daily", "FVG", "15m")
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from ..core.config import DEFAULT_TIMEFRAMES, BreakdownLabels, TimeframeTable
from ..core.enums import TradeOutcome
from ..core.models import TradeRecord
from .metrics import calculate_r_multiple

logger = logging.getLogger(__name__)

ROOT_DIMENSION = "all"
ROOT_LABEL = "All Trades"


# ------------------------------------------------------------------ #
# Stats                                                                #
# ------------------------------------------------------------------ #

@dataclass(frozen=True)
class BaseStats:
    """Aggregated outcome counts, net pnl and average R for one group.

    ``avg_r_multiple`` is None when no trade in the group has an
    R-multiple; ``r_count`` is the number of trades that do.
    """

    count: int = 0
    wins: int = 0
    losses: int = 0
    breakeven: int = 0
    pending: int = 0
    net_pnl: float = 0.0
    win_rate: float = 0.0
    avg_r_multiple: float | None = None
    r_count: int = 0

    def merge(self, other: BaseStats) -> BaseStats:
        """Combine two partial aggregates of the same group.

        The average R-multiple is weighted by each side's ``r_count``.
        """
        r_count = self.r_count + other.r_count
        avg_r = None
        if r_count > 0:
            r_total = (self.avg_r_multiple or 0.0) * self.r_count
            r_total += (other.avg_r_multiple or 0.0) * other.r_count
            avg_r = r_total / r_count
        wins = self.wins + other.wins
        losses = self.losses + other.losses
        return BaseStats(
            count=self.count + other.count,
            wins=wins,
            losses=losses,
            breakeven=self.breakeven + other.breakeven,
            pending=self.pending + other.pending,
            net_pnl=self.net_pnl + other.net_pnl,
            win_rate=_win_rate(wins, losses),
            avg_r_multiple=avg_r,
            r_count=r_count,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "count": self.count,
            "wins": self.wins,
            "losses": self.losses,
            "breakeven": self.breakeven,
            "pending": self.pending,
            "net_pnl": round(self.net_pnl, 2),
            "win_rate": round(self.win_rate, 2),
            "avg_r_multiple": (
                round(self.avg_r_multiple, 4) if self.avg_r_multiple is not None else None
            ),
        }


def _win_rate(wins: int, losses: int) -> float:
    decided = wins + losses
    return wins / decided * 100.0 if decided > 0 else 0.0


@dataclass
class _StatsAccumulator:
    """Running totals for one group."""

    count: int = 0
    wins: int = 0
    losses: int = 0
    breakeven: int = 0
    pending: int = 0
    net_pnl: float = 0.0
    r_total: float = 0.0
    r_count: int = 0

    def record(self, trade: TradeRecord) -> None:
        self.count += 1
        if trade.outcome == TradeOutcome.WIN:
            self.wins += 1
        elif trade.outcome == TradeOutcome.LOSS:
            self.losses += 1
        elif trade.outcome == TradeOutcome.BREAKEVEN:
            self.breakeven += 1
        else:
            self.pending += 1
        if trade.pnl is not None:
            self.net_pnl += trade.pnl
        r_multiple = calculate_r_multiple(trade)
        if r_multiple is not None:
            self.r_total += r_multiple
            self.r_count += 1

    def freeze(self) -> BaseStats:
        return BaseStats(
            count=self.count,
            wins=self.wins,
            losses=self.losses,
            breakeven=self.breakeven,
            pending=self.pending,
            net_pnl=self.net_pnl,
            win_rate=_win_rate(self.wins, self.losses),
            avg_r_multiple=self.r_total / self.r_count if self.r_count else None,
            r_count=self.r_count,
        )


def compute_stats(trades: Iterable[TradeRecord]) -> BaseStats:
    acc = _StatsAccumulator()
    for trade in trades:
        acc.record(trade)
    return acc.freeze()


# ------------------------------------------------------------------ #
# Tree                                                                 #
# ------------------------------------------------------------------ #

@dataclass
class BreakdownNode:
    dimension: str
    label: str
    stats: BaseStats
    children: dict[str, BreakdownNode] = field(default_factory=dict)

    def find(self, *labels: str) -> BreakdownNode | None:
        """Follow child labels down the tree; None if any step is missing."""
        node: BreakdownNode | None = self
        for label in labels:
            if node is None:
                return None
            node = node.children.get(label)
        return node

    def to_dict(self) -> dict[str, Any]:
        return {
            "dimension": self.dimension,
            "label": self.label,
            "stats": self.stats.to_dict(),
            "children": [child.to_dict() for child in self.children.values()],
        }


# ------------------------------------------------------------------ #
# Heatmap                                                              #
# ------------------------------------------------------------------ #

@dataclass(frozen=True)
class HeatmapCell:
    htf: str
    pd_array: str
    ltf: str
    stats: BaseStats

    def to_dict(self) -> dict[str, Any]:
        return {
            "htf": self.htf,
            "pd_array": self.pd_array,
            "ltf": self.ltf,
            **self.stats.to_dict(),
        }


@dataclass
class Heatmap:
    """(HTF, PD array) x LTF matrix of fully aggregated cells."""

    rows: list[tuple[str, str]] = field(default_factory=list)
    columns: list[str] = field(default_factory=list)
    cells: dict[tuple[str, str, str], HeatmapCell] = field(default_factory=dict)
    timeframes: TimeframeTable = field(default_factory=lambda: DEFAULT_TIMEFRAMES, repr=False)

    @classmethod
    def from_cells(
        cls,
        cells: Iterable[HeatmapCell],
        timeframes: TimeframeTable = DEFAULT_TIMEFRAMES,
    ) -> Heatmap:
        """Build a heatmap and derive its row and column order from the cells."""
        by_key = {(c.htf, c.pd_array, c.ltf): c for c in cells}
        pd_arrays_by_htf: dict[str, list[str]] = {}
        ltfs: list[str] = []
        for htf, pd_array, ltf in by_key:
            seen = pd_arrays_by_htf.setdefault(htf, [])
            if pd_array not in seen:
                seen.append(pd_array)
            if ltf not in ltfs:
                ltfs.append(ltf)

        rows = [
            (htf, pd_array)
            for htf in timeframes.sort(pd_arrays_by_htf)
            for pd_array in pd_arrays_by_htf[htf]
        ]
        return cls(
            rows=rows,
            columns=timeframes.sort(ltfs),
            cells=by_key,
            timeframes=timeframes,
        )

    def cell(self, htf: str, pd_array: str, ltf: str) -> HeatmapCell | None:
        return self.cells.get((htf, pd_array, ltf))

    def merge(self, other: Heatmap) -> Heatmap:
        """Combine two heatmaps cell by cell (count-weighted average R)."""
        merged = dict(self.cells)
        for key, cell in other.cells.items():
            existing = merged.get(key)
            if existing is None:
                merged[key] = cell
            else:
                merged[key] = HeatmapCell(
                    htf=cell.htf,
                    pd_array=cell.pd_array,
                    ltf=cell.ltf,
                    stats=existing.stats.merge(cell.stats),
                )
        return Heatmap.from_cells(merged.values(), self.timeframes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "rows": [{"htf": htf, "pd_array": pd_array} for htf, pd_array in self.rows],
            "columns": list(self.columns),
            "cells": [
                self.cells[(htf, pd_array, ltf)].to_dict()
                for htf, pd_array in self.rows
                for ltf in self.columns
                if (htf, pd_array, ltf) in self.cells
            ],
        }


@dataclass
class BreakdownResult:
    tree: BreakdownNode
    heatmap: Heatmap

    def to_dict(self) -> dict[str, Any]:
        return {"tree": self.tree.to_dict(), "heatmap": self.heatmap.to_dict()}


# ------------------------------------------------------------------ #
# Aggregator                                                           #
# ------------------------------------------------------------------ #

class BreakdownAggregator:
    """Stateless grouping of trades into a breakdown tree and a heatmap.

    Parameters
    ----------
    timeframes : TimeframeTable
        Priority table used to canonicalize and order HTF/LTF labels.
    labels : BreakdownLabels | None
        Sentinel labels for missing values.
    """

    LEVELS = ("htf", "pd_array_presence", "pd_array", "session", "ltf", "tag_combo")

    # Levels whose children are ordered by timeframe priority
    _TIMEFRAME_LEVELS = frozenset({"htf", "ltf"})

    def __init__(
        self,
        timeframes: TimeframeTable = DEFAULT_TIMEFRAMES,
        labels: BreakdownLabels | None = None,
    ) -> None:
        self._timeframes = timeframes
        self._labels = labels or BreakdownLabels()

    # ------------------------------------------------------------------ #
    # Grouping keys                                                        #
    # ------------------------------------------------------------------ #

    def _timeframe_label(self, value: str | None) -> str:
        if not value:
            return self._labels.not_available
        return self._timeframes.canonical(value)

    def key(self, trade: TradeRecord, dimension: str) -> str:
        """Group label of ``trade`` for one breakdown dimension."""
        if dimension == "htf":
            return self._timeframe_label(trade.htf)
        if dimension == "ltf":
            return self._timeframe_label(trade.ltf)
        if dimension == "pd_array_presence":
            return self._labels.with_pd_array if trade.has_pd_array else self._labels.without_pd_array
        if dimension == "pd_array":
            return trade.pd_array if trade.has_pd_array else self._labels.not_available
        if dimension == "session":
            return trade.session or self._labels.not_available
        if dimension == "tag_combo":
            return trade.tag_combo if trade.tags else self._labels.no_confluence
        raise ValueError(f"Unknown breakdown dimension: {dimension}")

    # ------------------------------------------------------------------ #
    # Tree                                                                 #
    # ------------------------------------------------------------------ #

    def build_tree(self, trades: list[TradeRecord]) -> BreakdownNode:
        root = BreakdownNode(
            dimension=ROOT_DIMENSION,
            label=ROOT_LABEL,
            stats=compute_stats(trades),
        )
        root.children = self._build_level(trades, 0)
        return root

    def _build_level(self, trades: list[TradeRecord], depth: int) -> dict[str, BreakdownNode]:
        if depth >= len(self.LEVELS):
            return {}
        dimension = self.LEVELS[depth]

        groups: dict[str, list[TradeRecord]] = {}
        for trade in trades:
            groups.setdefault(self.key(trade, dimension), []).append(trade)

        nodes = {
            label: BreakdownNode(
                dimension=dimension,
                label=label,
                stats=compute_stats(members),
                children=self._build_level(members, depth + 1),
            )
            for label, members in groups.items()
        }
        return {label: nodes[label] for label in self._order(dimension, nodes)}

    def _order(self, dimension: str, nodes: dict[str, BreakdownNode]) -> list[str]:
        if dimension in self._TIMEFRAME_LEVELS:
            return self._timeframes.sort(nodes)
        # sorted() is stable, so ties keep first-seen order
        return sorted(nodes, key=lambda label: -nodes[label].stats.count)

    # ------------------------------------------------------------------ #
    # Heatmap                                                              #
    # ------------------------------------------------------------------ #

    def build_heatmap(self, trades: list[TradeRecord]) -> Heatmap:
        accumulators: dict[tuple[str, str, str], _StatsAccumulator] = {}
        for trade in trades:
            key = (
                self.key(trade, "htf"),
                self.key(trade, "pd_array"),
                self.key(trade, "ltf"),
            )
            accumulators.setdefault(key, _StatsAccumulator()).record(trade)

        cells = [
            HeatmapCell(htf=htf, pd_array=pd_array, ltf=ltf, stats=acc.freeze())
            for (htf, pd_array, ltf), acc in accumulators.items()
        ]
        return Heatmap.from_cells(cells, self._timeframes)

    def build(self, trades: list[TradeRecord]) -> BreakdownResult:
        result = BreakdownResult(
            tree=self.build_tree(trades),
            heatmap=self.build_heatmap(trades),
        )
        logger.debug(
            "Breakdown built: trades=%d htf_groups=%d heatmap=%dx%d",
            len(trades),
            len(result.tree.children),
            len(result.heatmap.rows),
            len(result.heatmap.columns),
        )
        return result
