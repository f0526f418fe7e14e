"""
feedrecon framework layer: event sources and structured logging.
"""
