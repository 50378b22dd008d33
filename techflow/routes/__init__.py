"""Standalone routers that do not belong to a business domain"""
