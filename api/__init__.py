"""
API 路由模組
"""
