"""
Sales app: POS checkout, invoices and returns.
"""
