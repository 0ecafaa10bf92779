"""
Adapter layer

Integration with external resources (currently the SQLite database).
"""
