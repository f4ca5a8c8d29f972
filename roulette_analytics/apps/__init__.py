"""
Application interfaces for roulette analytics
"""
