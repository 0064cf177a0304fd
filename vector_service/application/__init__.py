"""
Application layer.

Request-path services orchestrating core logic and boundary adapters.
"""
