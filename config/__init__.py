"""
shardscope 配置包
"""
