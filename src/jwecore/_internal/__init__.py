"""jwecore's internal implementation"""
