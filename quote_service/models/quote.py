"""行情数据模型"""

from typing import List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class UpstreamRecord(BaseModel):
    """上游单条日线记录，所有字段均可缺失"""

    model_config = ConfigDict(extra="ignore", frozen=True)

    symbol: Optional[str] = None
    open: Optional[float] = None
    close: Optional[float] = None
    volume: Optional[Union[int, float]] = None


class EodResponse(BaseModel):
    """Marketstack /eod 响应体"""

    model_config = ConfigDict(extra="ignore")

    data: List[Optional[UpstreamRecord]] = Field(default_factory=list)

    @field_validator("data", mode="before")
    @classmethod
    def _coerce_data(cls, value):
        # 非数组的 data 视为空结果
        return value if isinstance(value, list) else []

    def records(self) -> List[UpstreamRecord]:
        return [r for r in self.data if r is not None]


class QuoteRecord(BaseModel):
    """标准化后的单个代码行情"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    symbol: str
    name: str = ""
    price: Optional[float] = None
    change_pct: Optional[float] = Field(default=None, alias="changePct")
    volume: Optional[Union[int, float]] = None


class ScoredRecord(QuoteRecord):
    score: float


class BatchStats(BaseModel):
    """批次统计量（总体均值 / 总体标准差）"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    mean_change: float = Field(alias="meanChange")
    sd_change: float = Field(alias="sdChange")
    mean_volume: float = Field(alias="meanVolume")
    sd_volume: float = Field(alias="sdVolume")


class CacheEntry(BaseModel):
    """缓存条目，写入后不可变"""

    model_config = ConfigDict(frozen=True)

    key: str
    timestamp: float
    payload: Tuple[ScoredRecord, ...]
