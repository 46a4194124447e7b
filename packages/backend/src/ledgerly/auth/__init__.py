"""Authentication — the identity gate in front of every resource route.

Users sign in with email/password and receive JWT access/refresh
tokens. Resource routes accept only a verified access token, and the
user id in it scopes every query the request makes.
"""
