"""
Module Storage - Catalog Store (clé/valeur)
"""
