"""
shardscope API 包
"""
