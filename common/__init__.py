"""
Common module - logging, exceptions and database access shared by all services.
"""
