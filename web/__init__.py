"""
Web interface for the hostel print desk.
"""
