"""
Resource correlation: discover the id of a resource a third party creates asynchronously.
"""
