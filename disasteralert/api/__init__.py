"""
DisasterAlert - REST API
"""
