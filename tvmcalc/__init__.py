"""
Time value of money calculator.
"""
