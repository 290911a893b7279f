"""
行情聚合服务
从单一上游（Marketstack）获取一批代码的最新日线快照，缓存并计算批内相对评分

架构分层：
  规范化层   (Symbols)      → 解析代码列表，生成缓存键
  数据获取层 (Acquisition)  → 单次分组请求 + 限流退避重试
  缓存层     (Cache)        → Redis / 进程内 TTL 缓存
  处理层     (Processing)   → 上游记录对齐回请求代码
  评分层     (Analysis)     → 批内 z-score 综合评分
"""

__version__ = "1.0.0"
