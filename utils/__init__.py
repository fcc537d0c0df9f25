"""
共用工具模組
"""
