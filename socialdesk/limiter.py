"""
Shared rate limiter for endpoints that call the external scheduler.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)
