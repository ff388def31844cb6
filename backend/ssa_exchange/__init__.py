"""
SSA Exchange - tokenized stock exchange backend.
"""
