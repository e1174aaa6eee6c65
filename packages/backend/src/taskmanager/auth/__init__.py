"""Authentication and authorization.

Users log in with email/password and receive a signed bearer token.
A token only authenticates while it is still recorded against its
user, so logout and logout-all are plain deletes of token rows.
"""
