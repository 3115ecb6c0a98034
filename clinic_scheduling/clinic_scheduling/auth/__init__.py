"""
Clinic User authentication: account lifecycle (service.py) and token
handling (tokens.py).
"""
