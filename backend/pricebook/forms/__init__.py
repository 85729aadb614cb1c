"""Descripteurs des formulaires d'administration du catalogue."""
