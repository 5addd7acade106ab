"""
Scripture Study - HTTP API
"""
