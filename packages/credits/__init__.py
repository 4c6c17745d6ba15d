"""
Credits package - per-user credit balance for generation requests.

Generation reserves its cost up front and later commits or releases the
reservation; the reconciliation worker releases reservations left HELD.
"""
