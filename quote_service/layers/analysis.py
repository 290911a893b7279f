"""
Layer 4 – 评分层
在当前批次内对涨跌幅与成交量做 z-score，合成相对评分：
    score = 50 + 20 * z(changePct) + 15 * z(volume)
评分只在本批次内有意义，批次成员变化时必须重新计算。
"""

import logging
from typing import List, Optional, Sequence

import pandas as pd

from quote_service.models.quote import BatchStats, QuoteRecord, ScoredRecord

logger = logging.getLogger(__name__)

BASE_SCORE = 50.0
CHANGE_WEIGHT = 20.0
VOLUME_WEIGHT = 15.0


def zscore(value: float, mean: float, sd: float) -> float:
    return (value - mean) / sd if sd != 0 else 0.0


class AnalysisLayer:
    """评分层：批次统计 + 综合评分"""

    def to_frame(self, batch: Sequence[QuoteRecord]) -> pd.DataFrame:
        """聚合用数值表，None 记为 0"""
        df = pd.DataFrame(
            [{"change_pct": r.change_pct, "volume": r.volume} for r in batch],
            columns=["change_pct", "volume"],
        )
        return df.astype("float64").fillna(0.0)

    def batch_stats(self, batch: Sequence[QuoteRecord]) -> BatchStats:
        """总体均值与总体标准差（除以 n）"""
        df = self.to_frame(batch)
        if df.empty:
            return BatchStats(mean_change=0.0, sd_change=0.0, mean_volume=0.0, sd_volume=0.0)
        return BatchStats(
            mean_change=float(df["change_pct"].mean()),
            sd_change=float(df["change_pct"].std(ddof=0)),
            mean_volume=float(df["volume"].mean()),
            sd_volume=float(df["volume"].std(ddof=0)),
        )

    def score_one(self, record: QuoteRecord, stats: BatchStats) -> float:
        z_change = zscore(record.change_pct or 0.0, stats.mean_change, stats.sd_change)
        z_volume = zscore(record.volume or 0.0, stats.mean_volume, stats.sd_volume)
        return BASE_SCORE + CHANGE_WEIGHT * z_change + VOLUME_WEIGHT * z_volume

    def score(self, batch: Sequence[QuoteRecord]) -> List[ScoredRecord]:
        if not batch:
            return []
        stats = self.batch_stats(batch)
        logger.debug(f"批次统计: {stats.model_dump(by_alias=True)}")
        return [
            ScoredRecord(**r.model_dump(), score=self.score_one(r, stats))
            for r in batch
        ]


# ── 模块级别单例 ──────────────────────────────────────────
_analysis: Optional[AnalysisLayer] = None


def get_analysis_layer() -> AnalysisLayer:
    global _analysis
    if _analysis is None:
        _analysis = AnalysisLayer()
    return _analysis
