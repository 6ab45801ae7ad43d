"""
REST API for BonFire
"""
