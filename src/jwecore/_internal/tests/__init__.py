"""jwecore tests"""
