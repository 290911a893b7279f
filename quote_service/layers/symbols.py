"""
代码规范化
将 "aapl; msft,AAPL" 这类原始输入解析为有序、去重、大写的代码集合，
并给出确定性的缓存键。
"""

import re
from typing import Tuple

from pydantic import BaseModel, ConfigDict

from quote_service.errors import ValidationError

_DELIMITERS = re.compile(r"[;,]")


class SymbolSet(BaseModel):
    """有序代码集合，顺序为请求中首次出现的顺序"""

    model_config = ConfigDict(frozen=True)

    symbols: Tuple[str, ...]

    @property
    def key(self) -> str:
        return ",".join(self.symbols)

    def __len__(self) -> int:
        return len(self.symbols)


def normalize(raw: str) -> SymbolSet:
    """解析原始代码列表；为空或过滤后无有效代码时抛出 ValidationError"""
    if not raw or not raw.strip():
        raise ValidationError("Missing symbols param")

    seen = set()
    symbols = []
    for token in _DELIMITERS.split(raw):
        symbol = token.strip().upper()
        if symbol and symbol not in seen:
            seen.add(symbol)
            symbols.append(symbol)

    if not symbols:
        raise ValidationError("No symbols provided")
    return SymbolSet(symbols=tuple(symbols))
