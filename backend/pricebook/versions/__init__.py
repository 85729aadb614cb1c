"""
Module Versions - Versions de tarifs et import/export JSON/CSV
"""
