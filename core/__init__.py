"""
慢查詢解析與統計核心
"""
