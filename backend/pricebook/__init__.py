"""Pricebook - tarification de menuiseries et devis versionnés."""
