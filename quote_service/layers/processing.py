"""
Layer 3 – 数据处理层
将上游记录（可能缺失、乱序或重复）对齐回请求的代码列表，并做字段标准化。
"""

import logging
from typing import Dict, List, Optional, Sequence

from quote_service.layers.symbols import SymbolSet
from quote_service.models.quote import QuoteRecord, UpstreamRecord

logger = logging.getLogger(__name__)


def change_pct(close: Optional[float], open_: Optional[float]) -> Optional[float]:
    """开盘到收盘的涨跌幅（%），缺少任一值或开盘价为 0 时返回 None"""
    if close is None or open_ is None or open_ == 0:
        return None
    return (close - open_) / open_ * 100


class ProcessingLayer:
    """数据处理层：对齐 + 标准化"""

    def index_by_symbol(self, upstream: Sequence[UpstreamRecord]) -> Dict[str, UpstreamRecord]:
        """按大写代码建立索引，重复代码保留第一条"""
        index: Dict[str, UpstreamRecord] = {}
        for record in upstream:
            if record.symbol:
                index.setdefault(record.symbol.upper(), record)
        return index

    def to_quote(self, symbol: str, record: Optional[UpstreamRecord]) -> QuoteRecord:
        if record is None:
            return QuoteRecord(symbol=symbol)
        return QuoteRecord(
            symbol=symbol,
            name=record.symbol or "",
            price=record.close,
            change_pct=change_pct(record.close, record.open),
            # 成交量为 0 视同缺失
            volume=record.volume or None,
        )

    def reconcile(
        self, requested: SymbolSet, upstream: Sequence[UpstreamRecord]
    ) -> List[QuoteRecord]:
        """
        每个请求代码输出一条记录，顺序与请求一致

        上游缺失的代码输出数值全为 None、name 为空串的记录。
        """
        index = self.index_by_symbol(upstream)
        missing = [s for s in requested.symbols if s not in index]
        if missing:
            logger.info(f"上游缺失 {len(missing)} 个代码: {','.join(missing)}")
        return [self.to_quote(s, index.get(s)) for s in requested.symbols]


# ── 模块级别单例 ──────────────────────────────────────────
_processor: Optional[ProcessingLayer] = None


def get_processing_layer() -> ProcessingLayer:
    global _processor
    if _processor is None:
        _processor = ProcessingLayer()
    return _processor
