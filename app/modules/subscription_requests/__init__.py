"""
Subscription requests module.

Public signup form: prospective companies request a plan and an operator
approves or rejects the request.
"""
