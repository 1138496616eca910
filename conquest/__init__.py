"""
Dice Conquest - territory control over a vector map.
"""
