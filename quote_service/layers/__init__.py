"""
数据流分层架构
  Layer 1 – Acquisition  : 上游分组请求与限流重试
  Layer 2 – Cache        : TTL 缓存（Redis → 内存）
  Layer 3 – Processing   : 上游记录对齐与标准化
  Layer 4 – Analysis     : 批内综合评分
"""
