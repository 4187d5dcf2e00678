"""
WebSocket push channel: message models, fan-out and the socket handler.
"""
