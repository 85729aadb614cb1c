"""
Module Pricing - Moteur de tarification (fonctions pures)
"""
